from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session

from everytrack.exceptions import ConfigurationError, LookupFailure
from everytrack.seeder.resolver import NameToIdIndex

logger = logging.getLogger(__name__)

ReferenceRow = Mapping[str, Any]


class SeedPolicy(str, enum.Enum):
    REPLACE = "replace"
    SKIP_IF_POPULATED = "skip_if_populated"


@dataclass(frozen=True)
class ForeignKey:
    """
    A row field holding a display name that must become a foreign key.

    `field` is the key in the dataset row, `column` the FK column on the
    target model, and `model.<lookup>` the column the name is matched against.
    """

    field: str
    column: str
    model: Type[Any]
    lookup: str = "name"

    @property
    def table(self) -> str:
        return self.model.__tablename__


@dataclass(frozen=True)
class SeedResult:
    name: str
    table: str
    status: str  # applied|skipped
    deleted: int = 0
    inserted: int = 0


class BaseSeeder(ABC):
    """
    Abstract base class for all reference data seeders.

    A seeder owns one target table (`model`) and a dataset returned by
    `rows()`. `run()` applies it according to `policy`:

    - replace: delete every row, then insert the dataset
    - skip_if_populated: do nothing when the table has rows, else insert

    Attributes:
        name (str): Unique unit name used by the CLI and settings.
        priority (int): Execution order priority (lower runs first).
        foreign_keys: Fields resolved from names to ids before insert.
    """

    name: str = ""
    priority: int = 100
    model: Any = None
    policy: SeedPolicy = SeedPolicy.REPLACE
    foreign_keys: Tuple[ForeignKey, ...] = ()

    def __init__(self, session: Session, *, policy: Optional[SeedPolicy] = None):
        self.session = session
        self.policy = SeedPolicy(policy or type(self).policy)

    @abstractmethod
    def rows(self) -> Sequence[ReferenceRow]:
        """Return the dataset for the target table."""

    @classmethod
    def table(cls) -> str:
        if cls.model is None:
            raise ConfigurationError(f"Seeder {cls.__name__} has no model", config_key="model")
        return cls.model.__tablename__

    @classmethod
    def dependencies(cls) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(fk.table for fk in cls.foreign_keys))

    def run(self) -> SeedResult:
        """Execute the seeding logic. Committing is left to the caller."""
        table = self.table()

        if self.policy == SeedPolicy.SKIP_IF_POPULATED:
            existing = self.count()
            if existing:
                self.log(f"'{table}' already has {existing} rows. Skipping.")
                return SeedResult(self.name, table, "skipped")

        deleted = self.clear()

        resolved = self.resolve(self.rows())
        inserted = self.insert(resolved)
        self.log(f"Inserted {inserted} rows into '{table}' (deleted {deleted}).")
        return SeedResult(self.name, table, "applied", deleted=deleted, inserted=inserted)

    def count(self) -> int:
        stmt = select(func.count()).select_from(self.model)
        return int(self.session.execute(stmt).scalar_one())

    def clear(self) -> int:
        result = self.session.execute(delete(self.model))
        return max(result.rowcount or 0, 0)

    def resolve(self, rows: Sequence[ReferenceRow]) -> List[Dict[str, Any]]:
        """
        Replace every declared foreign-key field with the id it names.

        All rows are checked before anything is returned; absent names are
        collected and raised together so the unit inserts nothing.
        """
        if not self.foreign_keys:
            return [dict(row) for row in rows]

        indexes = [
            (fk, NameToIdIndex.build(self.session, fk.model, fk.lookup))
            for fk in self.foreign_keys
        ]
        missing: Dict[ForeignKey, set] = {}
        resolved: List[Dict[str, Any]] = []
        for position, row in enumerate(rows):
            out = dict(row)
            for fk, index in indexes:
                if fk.field not in out:
                    raise ConfigurationError(
                        f"Row {position} for '{self.table()}' has no '{fk.field}' field",
                        config_key=fk.field,
                    )
                ref = out.pop(fk.field)
                if ref in index:
                    out[fk.column] = index[ref]
                else:
                    missing.setdefault(fk, set()).add(ref)
            resolved.append(out)

        if missing:
            fk, names = next(iter(missing.items()))
            raise LookupFailure(
                fk.table,
                names,
                field=fk.field,
                target=self.table(),
                unresolved={f.field: sorted(n) for f, n in missing.items()},
            )
        return resolved

    def insert(self, rows: List[Dict[str, Any]]) -> int:
        if not rows:
            return 0
        self.session.execute(insert(self.model), rows)
        return len(rows)

    def log(self, message: str):
        """Helper to log seeding progress."""
        logger.info(f"[{self.__class__.__name__}] {message}")
