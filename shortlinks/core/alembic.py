"""Alembic migration helpers.

The schema is owned by the migrations under ``alembic/``; the application
never calls ``create_all`` outside of tests.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config


logger = logging.getLogger(__name__)

# Project paths
ALEMBIC_DIR = Path(__file__).resolve().parent.parent.parent / "alembic"
ALEMBIC_INI = Path(__file__).resolve().parent.parent.parent / "alembic.ini"


def get_alembic_config() -> Config:
    """Build an Alembic config for this project's migration scripts."""
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    # Keep the application's loguru interception in place
    config.attributes["configure_logger"] = False
    return config


def run_migrations(revision: str = "head") -> None:
    """Upgrade the database schema to ``revision``.

    Blocking; call it from a worker thread when an event loop is running.
    """
    try:
        command.upgrade(get_alembic_config(), revision)
    except Exception as e:
        logger.error(f"Failed to run migrations: {e}")
        raise
    logger.info(f"Database schema upgraded to {revision}")
