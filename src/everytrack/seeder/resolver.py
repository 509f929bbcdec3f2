from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from everytrack.exceptions import ConfigurationError, LookupFailure


class NameToIdIndex(Mapping[str, str]):
    """
    Read-only display name -> id mapping for one dependency table.

    Built once per seed unit. A missing name raises LookupFailure (a KeyError),
    so `in` and `.get()` keep their usual Mapping behaviour.
    """

    def __init__(self, table: str, pairs: Iterable[Tuple[Any, str]]):
        self.table = table
        self._ids: Dict[str, str] = {}
        for row_id, name in pairs:
            if name in self._ids and self._ids[name] != row_id:
                raise ConfigurationError(
                    f"Name '{name}' is not unique in '{table}'",
                    config_key=table,
                    name=name,
                )
            self._ids[name] = row_id

    @classmethod
    def build(cls, session: Session, model: Any, column: str = "name") -> "NameToIdIndex":
        lookup = getattr(model, column)
        rows = session.execute(select(model.id, lookup)).all()
        return cls(model.__tablename__, ((row[0], row[1]) for row in rows))

    def __getitem__(self, name: str) -> str:
        try:
            return self._ids[name]
        except KeyError:
            raise LookupFailure(self.table, [name]) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"NameToIdIndex({self.table!r}, {len(self)} names)"
