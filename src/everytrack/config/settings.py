from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVERYTRACK_",
        env_file=".env",
        extra="ignore",
    )

    # Runtime
    ENVIRONMENT: str = Field(default="dev", description="Environment name")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level for the CLI")

    # Database
    DATABASE_URL: str = Field(default="sqlite:///everytrack_dev.db")
    DB_SCHEMA: str = Field(
        default="",
        description="Schema holding the reference tables, e.g. everytrack_backend on Postgres; empty uses the default schema",
    )
    DB_ECHO: bool = Field(default=False, description="Echo SQL statements")
    SCHEMA_MODE: str = Field(
        default="create_all",
        description="create_all: auto-create tables (dev), migrations: tables are managed upstream",
    )

    # Seeding
    SKIP_IF_POPULATED: str = Field(
        default="",
        description="Comma-separated seed unit names that are skipped when their table already has rows",
    )

    def skip_if_populated_units(self) -> List[str]:
        return [name.strip() for name in self.SKIP_IF_POPULATED.split(",") if name.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
