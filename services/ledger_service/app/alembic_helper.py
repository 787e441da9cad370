import asyncio
import os

from alembic import command
from alembic.config import Config
from loguru import logger

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "db", "migrations")


def _upgrade_head(database_dsn: str) -> None:
    alembic_ini_path = os.path.join(MIGRATIONS_DIR, "alembic.ini")
    if not os.path.exists(alembic_ini_path):
        logger.warning("Alembic config not found at {}, skipping migrations.", alembic_ini_path)
        return

    alembic_cfg = Config(alembic_ini_path)
    alembic_cfg.set_main_option("script_location", MIGRATIONS_DIR)
    alembic_cfg.set_main_option("sqlalchemy.url", database_dsn)
    logger.info("Running Alembic migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Alembic migrations applied.")


async def run_alembic_migrations(database_dsn: str) -> None:
    """Upgrade the ledger schema to head using the synchronous driver."""
    # Alembic's command API is blocking; keep it off the event loop
    await asyncio.to_thread(_upgrade_head, database_dsn)
