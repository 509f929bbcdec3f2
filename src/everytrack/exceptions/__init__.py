from everytrack.exceptions.handlers import (
    ConfigurationError,
    LookupFailure,
    SeedError,
)

__all__ = [
    "SeedError",
    "LookupFailure",
    "ConfigurationError",
]
