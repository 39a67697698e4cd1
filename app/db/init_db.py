import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

import app.db.base  # noqa: F401  registers every model on Base.metadata
from app.db.session import engine, Base

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def init_db() -> None:
    """
    Initialize the database by running Alembic migrations.
    """
    try:
        alembic_cfg = Config(str(ALEMBIC_INI))
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations applied successfully")
    except Exception as e:
        logger.error(f"Error applying database migrations: {e}")
        raise


def create_all_tables(bind=None) -> set:
    """Create any missing tables and return the names of the ones created"""
    bind = bind or engine
    existing_tables = set(inspect(bind).get_table_names())

    Base.metadata.create_all(bind=bind)

    new_tables = set(inspect(bind).get_table_names()) - existing_tables
    if new_tables:
        logger.info(f"Created new tables: {new_tables}")
    return new_tables
