#!/usr/bin/env python3
"""Database bootstrap: run Alembic migrations, then seed the standards catalog.

- Always run `alembic upgrade head` on startup.
- If migrations fail, fail fast (don't start with an unknown schema).
- Seeding only happens when the metric_standard table is empty.
"""

import logging
import sys
import time

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def check_db_ready() -> bool:
    """Check if database is ready"""
    from core.database import check_db_connection

    return check_db_connection()


def _get_alembic_config():
    """Load Alembic config for programmatic migrations."""
    import os
    from alembic.config import Config

    here = os.path.dirname(os.path.abspath(__file__))
    return Config(os.path.join(here, "alembic.ini"))


def alembic_upgrade_head() -> None:
    """Apply all pending migrations."""
    from alembic import command

    command.upgrade(_get_alembic_config(), "head")


def seed_standards() -> None:
    """Load the local standards libraries into an empty catalog."""
    from core.database import get_db_sync
    from services.goal_plans.standards_manager import StandardsManager

    db = get_db_sync()
    try:
        StandardsManager(db).initialize()
    finally:
        db.close()


def main():
    import core.logging  # noqa: F401  configures handlers

    logger.info("Waiting for database to be ready...")
    max_retries = 30
    for attempt in range(1, max_retries + 1):
        if check_db_ready():
            logger.info("Database is ready")
            break
        logger.info(f"Database is unavailable - sleeping (attempt {attempt}/{max_retries})")
        time.sleep(1)
    else:
        logger.error("Database is not ready after maximum retries")
        sys.exit(1)

    try:
        alembic_upgrade_head()
        logger.info("Migrations completed successfully")
    except Exception as e:
        logger.error(f"Alembic upgrade failed: {e}", exc_info=True)
        sys.exit(1)

    try:
        seed_standards()
    except Exception as e:
        # Enrichment seeds lazily too; a failed seed is not fatal at startup
        logger.warning(f"Standards seeding failed: {e}")


if __name__ == '__main__':
    main()
