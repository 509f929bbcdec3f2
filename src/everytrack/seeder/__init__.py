from .base import BaseSeeder, ForeignKey, SeedPolicy, SeedResult
from .registry import SeederRegistry
from .resolver import NameToIdIndex
from .runner import apply_all

# Import sub-modules to ensure they register themselves when 'seeder' is imported
# Order here doesn't determine execution order (priority does), but importing is required.
from .reference import providers
from .reference import account_types
from .reference import currencies
