from everytrack.models.reference import Currency
from everytrack.seeder.file_loader import BaseFileSeeder
from everytrack.seeder.registry import SeederRegistry


@SeederRegistry.register
class CurrencySeeder(BaseFileSeeder):
    """Seeds the currencies balances can be held in."""
    name = "currency"
    priority = 30
    model = Currency
    data_file = "currencies.yaml"
