from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Type

from sqlalchemy.orm import Session

from everytrack.exceptions import ConfigurationError
from everytrack.seeder.base import BaseSeeder, SeedPolicy, SeedResult

logger = logging.getLogger(__name__)


def validate_order(units: Sequence[Type[BaseSeeder]]) -> None:
    """
    Check every dependency table is seeded before the unit that needs it.

    A dependency with no producing unit in `units` is assumed to be populated
    already and is resolved against whatever the table holds at run time.
    """
    for position, unit in enumerate(units):
        for table in unit.dependencies():
            producers = [i for i, other in enumerate(units) if other.table() == table]
            if producers and min(producers) >= position:
                raise ConfigurationError(
                    f"Seeder '{unit.name}' depends on '{table}' which is seeded after it",
                    config_key="priority",
                    unit=unit.name,
                    dependency=table,
                )


def apply_all(
    units: Iterable[Type[BaseSeeder]],
    session: Session,
    *,
    skip_if_populated: Iterable[str] = (),
) -> List[SeedResult]:
    """
    Run seed units in the given order, one transaction per unit.

    A failing unit is rolled back and its error re-raised; units committed
    before it stay committed.
    """
    ordered = list(units)
    validate_order(ordered)

    names = {unit.name for unit in ordered}
    forced_skip = set(skip_if_populated)
    unknown = sorted(forced_skip - names)
    if unknown:
        raise ConfigurationError(
            f"Unknown seed units: {', '.join(unknown)}",
            config_key="SKIP_IF_POPULATED",
            unknown=unknown,
        )

    total = len(ordered)
    logger.info(f"Starting seeding process. {total} seeders scheduled.")

    results: List[SeedResult] = []
    for index, seeder_cls in enumerate(ordered, 1):
        policy = SeedPolicy.SKIP_IF_POPULATED if seeder_cls.name in forced_skip else None
        seeder = seeder_cls(session, policy=policy)
        try:
            seeder.log(f"Running ({index}/{total})...")
            result = seeder.run()
            session.commit()
            seeder.log("Completed.")
        except Exception as e:
            session.rollback()
            logger.error(f"Seeder {seeder_cls.__name__} failed: {e}")
            raise
        results.append(result)

    return results
