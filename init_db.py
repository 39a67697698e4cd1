"""
Database initialization script.
Applies the Alembic migrations, or creates the tables directly with --create-all.
Run this as: python init_db.py [--create-all]
"""

import argparse
import logging
import sys

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("db-init")

from app.core.config import settings
from app.db.init_db import create_all_tables, init_db

def main() -> int:
    parser = argparse.ArgumentParser(description="Initialize the Snapgram database")
    parser.add_argument(
        "--create-all",
        action="store_true",
        help="Create tables from the models instead of running migrations",
    )
    args = parser.parse_args()

    logger.info(f"Initializing database at: {settings.DATABASE_URL}")
    try:
        if args.create_all:
            created = create_all_tables()
            logger.info(f"Newly created tables: {sorted(created) or 'none'}")
        else:
            init_db()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        return 1

    logger.info("Database initialization completed successfully")
    return 0

if __name__ == "__main__":
    sys.exit(main())
