import logging
from typing import Iterable, List, Optional, Type

from sqlalchemy.orm import Session

from everytrack.config import Settings, get_settings
from everytrack.exceptions import ConfigurationError
from everytrack.seeder.base import BaseSeeder, SeedResult
from everytrack.seeder.runner import apply_all

logger = logging.getLogger(__name__)


class SeederRegistry:
    """Registry to manage and execute registered seeders."""

    _seeders: List[Type[BaseSeeder]] = []

    @classmethod
    def register(cls, seeder_cls: Type[BaseSeeder]):
        """Decorator to register a seeder class."""
        if not seeder_cls.name:
            raise ConfigurationError(f"Seeder {seeder_cls.__name__} has no name", config_key="name")
        for existing in cls._seeders:
            if existing is seeder_cls:
                return seeder_cls
            if existing.name == seeder_cls.name:
                raise ConfigurationError(
                    f"Seeder name '{seeder_cls.name}' is already registered by {existing.__name__}",
                    config_key="name",
                )
        cls._seeders.append(seeder_cls)
        return seeder_cls

    @classmethod
    def ordered(cls, only: Optional[Iterable[str]] = None) -> List[Type[BaseSeeder]]:
        """Registered seeders in priority order, optionally limited to `only`."""
        # sorted() is stable, so equal priorities keep registration order
        seeders = sorted(cls._seeders, key=lambda x: x.priority)
        if only is None:
            return seeders

        wanted = set(only)
        unknown = sorted(wanted - {s.name for s in seeders})
        if unknown:
            raise ConfigurationError(
                f"Unknown seed units: {', '.join(unknown)}", config_key="only", unknown=unknown
            )
        return [s for s in seeders if s.name in wanted]

    @classmethod
    def get(cls, name: str) -> Type[BaseSeeder]:
        for seeder_cls in cls._seeders:
            if seeder_cls.name == name:
                return seeder_cls
        raise ConfigurationError(f"Unknown seed unit: {name}", config_key="name")

    @classmethod
    def run_all(
        cls,
        session: Session,
        *,
        only: Optional[Iterable[str]] = None,
        skip_if_populated: Iterable[str] = (),
        settings: Optional[Settings] = None,
    ) -> List[SeedResult]:
        """Run registered seeders in priority order."""
        settings = settings or get_settings()
        skip = set(settings.skip_if_populated_units()) | set(skip_if_populated)
        seeders = cls.ordered(only)
        logger.info(f"{len(cls._seeders)} seeders registered, {len(seeders)} selected.")
        selected = {s.name for s in seeders}
        registered = {s.name for s in cls._seeders}
        unknown = sorted(skip - registered)
        if unknown:
            raise ConfigurationError(
                f"Unknown seed units: {', '.join(unknown)}",
                config_key="SKIP_IF_POPULATED",
                unknown=unknown,
            )
        # forced skips naming units outside `only` do not apply to this run
        return apply_all(seeders, session, skip_if_populated=skip & selected)
