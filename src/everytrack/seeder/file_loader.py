import os
from types import MappingProxyType
from typing import List

import yaml

from everytrack.exceptions import ConfigurationError
from everytrack.seeder.base import BaseSeeder, ReferenceRow


class BaseFileSeeder(BaseSeeder):
    """
    Base class for seeding reference data from YAML files.
    Expects data files to be in src/everytrack/seeder/data/
    """

    data_file: str = ""

    @property
    def data_dir(self):
        # Resolve absolute path to 'data' directory relative to this file
        current_dir = os.path.dirname(os.path.abspath(__file__))
        return os.path.join(current_dir, 'data')

    def rows(self) -> List[ReferenceRow]:
        return self.load_yaml(self.data_file)

    def load_yaml(self, filename: str) -> List[ReferenceRow]:
        """Load a list of rows from a YAML file in the data directory."""
        file_path = os.path.join(self.data_dir, filename)
        if not filename or not os.path.exists(file_path):
            raise ConfigurationError(f"Data file not found at {file_path}", config_key="data_file")

        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if not isinstance(data, list):
            raise ConfigurationError(f"{filename} must contain a list of rows", config_key="data_file")
        for position, entry in enumerate(data):
            if not isinstance(entry, dict):
                raise ConfigurationError(
                    f"{filename} row {position} is not a mapping", config_key="data_file"
                )

        self.log(f"Loaded {len(data)} records from {filename}")
        return [MappingProxyType(entry) for entry in data]
