from everytrack.models.reference import AssetProvider
from everytrack.seeder.file_loader import BaseFileSeeder
from everytrack.seeder.registry import SeederRegistry


@SeederRegistry.register
class AssetProviderSeeder(BaseFileSeeder):
    """Seeds the supported banks and brokers."""
    name = "asset_provider"
    priority = 10
    model = AssetProvider
    data_file = "asset_providers.yaml"
