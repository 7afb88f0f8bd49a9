# src/brief_measure/scripts/migrate.py
"""Apply or roll back database migrations.

Usage::

    brief-measure-migrate up     # apply every pending migration
    brief-measure-migrate down   # roll back the most recent migration
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from brief_measure.core.errors import ConfigurationError
from brief_measure.core.settings import load_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def build_alembic_config(database_url: str) -> Config:
    """Point Alembic at the project's migrations folder and database."""
    cfg = Config(str(MIGRATIONS_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def migrate_up(database_url: str) -> None:
    command.upgrade(build_alembic_config(database_url), "head")


def current_revision(database_url: str) -> str | None:
    engine = create_engine(database_url, poolclass=NullPool)
    try:
        with engine.connect() as connection:
            return MigrationContext.configure(connection).get_current_revision()
    finally:
        engine.dispose()


def migrate_down(database_url: str) -> bool:
    """Roll back one revision.

    Returns:
        False if the database had no applied migrations, True otherwise.
    """
    if current_revision(database_url) is None:
        return False
    command.downgrade(build_alembic_config(database_url), "-1")
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Brief Measure database migrations")
    parser.add_argument("direction", choices=["up", "down"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        settings = load_settings()
    except ConfigurationError as err:
        logger.error("migration %s failed: %s", args.direction, err.message)
        return 1

    if args.direction == "up":
        migrate_up(settings.database_url)
        logger.info("migrations applied")
    elif migrate_down(settings.database_url):
        logger.info("rolled back one migration")
    else:
        logger.info("no migrations to roll back")
    return 0


if __name__ == "__main__":
    sys.exit(main())
