from everytrack.models.reference import AssetProvider, AssetProviderAccountType
from everytrack.seeder.base import ForeignKey
from everytrack.seeder.file_loader import BaseFileSeeder
from everytrack.seeder.registry import SeederRegistry


@SeederRegistry.register
class AccountTypeSeeder(BaseFileSeeder):
    """Seeds bank and broker account types; runs after AssetProviderSeeder (10)."""
    name = "asset_provider_account_type"
    priority = 20
    model = AssetProviderAccountType
    foreign_keys = (
        ForeignKey(field="asset_provider", column="asset_provider_id", model=AssetProvider),
    )
    data_file = "asset_provider_account_types.yaml"
