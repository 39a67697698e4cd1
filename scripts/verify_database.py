#!/usr/bin/env python3
"""
Verify the database schema.
Checks that every table and the unique constraints the API relies on exist.

Run with: python scripts/verify_database.py
"""
import logging
import sys
from pathlib import Path

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.db.session import engine

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

REQUIRED_TABLES = ["users", "posts", "likes", "comments", "follows"]
REQUIRED_UNIQUE = {
    "likes": {"post_id", "user_id"},
    "follows": {"follower_id", "following_id"},
}

def verify_database(bind=None) -> bool:
    inspector = inspect(bind or engine)
    ok = True
    try:
        existing = set(inspector.get_table_names())
        for table in REQUIRED_TABLES:
            if table in existing:
                logger.info(f"✅ table {table}")
            else:
                logger.error(f"❌ table {table} is missing")
                ok = False

        for table, columns in REQUIRED_UNIQUE.items():
            if table not in existing:
                continue
            constraints = [set(c["column_names"]) for c in inspector.get_unique_constraints(table)]
            indexes = [set(i["column_names"]) for i in inspector.get_indexes(table) if i.get("unique")]
            if columns in constraints or columns in indexes:
                logger.info(f"✅ unique ({', '.join(sorted(columns))}) on {table}")
            else:
                logger.error(f"❌ unique ({', '.join(sorted(columns))}) on {table} is missing")
                ok = False
    except SQLAlchemyError as e:
        logger.error(f"❌ Could not inspect database: {e}")
        return False
    return ok

if __name__ == "__main__":
    sys.exit(0 if verify_database() else 1)
