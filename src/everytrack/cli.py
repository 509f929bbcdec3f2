from __future__ import annotations

import logging
from typing import List, Optional

import typer

from everytrack import __version__
from everytrack.config import get_settings

app = typer.Typer(add_completion=False, help="Everytrack reference data seeder")

logger = logging.getLogger("everytrack.seeder")


def _configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def version() -> None:
    typer.echo(__version__)


@app.command("list")
def list_units() -> None:
    """
    Show seed units in execution order.
    """
    from everytrack.seeder import SeederRegistry

    for seeder_cls in SeederRegistry.ordered():
        deps = ", ".join(seeder_cls.dependencies()) or "-"
        typer.echo(
            f"{seeder_cls.priority:>4}  {seeder_cls.name:<28} table={seeder_cls.table()} "
            f"policy={seeder_cls.policy.value} depends_on={deps}"
        )


@app.command()
def seed(
    only: Optional[List[str]] = typer.Option(
        None, "--only", help="Seed unit to run (repeatable); default runs all"
    ),
    skip_if_populated: Optional[List[str]] = typer.Option(
        None,
        "--skip-if-populated",
        help="Seed unit to skip when its table already has rows (repeatable)",
    ),
    create_tables: bool = typer.Option(
        True, help="Create missing tables first (ignored when SCHEMA_MODE=migrations)"
    ),
) -> None:
    """
    Clear and re-insert the reference tables.
    """
    from everytrack.database import SessionLocal, init_db
    from everytrack.exceptions import SeedError
    from everytrack.seeder import SeederRegistry

    _configure_logging()
    settings = get_settings()
    logger.info(f"Running seeder against schema: {settings.DB_SCHEMA or '<default>'}")

    init_db(create_tables=create_tables)

    session = SessionLocal()
    try:
        results = SeederRegistry.run_all(
            session,
            only=only or None,
            skip_if_populated=skip_if_populated or (),
            settings=settings,
        )
    except SeedError as e:
        logger.error(f"Seeding failed [{e.code}]: {e.message}")
        raise typer.Exit(1)
    except Exception as e:
        logger.exception(f"Seeding failed: {e}")
        raise typer.Exit(1)
    finally:
        session.close()

    for result in results:
        typer.echo(
            f"{result.name}: {result.status} "
            f"(deleted={result.deleted}, inserted={result.inserted})"
        )
    logger.info("Seeding completed successfully.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
