from __future__ import annotations

from typing import Any, Dict, Iterable, Optional


class SeedError(Exception):
    """
    Base exception for the seeder.

    Carries a stable `code` and structured `details` so callers (CLI, logs)
    can report failures without parsing messages.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "SEED_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details: Dict[str, Any] = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class LookupFailure(SeedError, KeyError):
    """
    One or more foreign-key names are absent from the dependency table.

    Also a KeyError so name indexes behave like ordinary mappings.
    """

    def __init__(self, table: str, names: Iterable[str], field: Optional[str] = None, **kwargs: Any):
        missing = sorted(set(names))
        message = f"Unresolved names in '{table}': {', '.join(repr(n) for n in missing)}"
        details: Dict[str, Any] = {"table": table, "missing": missing}
        if field:
            details["field"] = field
        details.update(kwargs)
        super().__init__(message, code="LOOKUP_FAILURE", details=details)
        self.table = table
        self.missing = missing


class ConfigurationError(SeedError):
    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs: Any):
        details: Dict[str, Any] = {"config_key": config_key} if config_key else {}
        details.update(kwargs)
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)
