from sqlalchemy import create_engine

from app.db.init_db import create_all_tables
from scripts.verify_database import verify_database


def test_verify_database_accepts_full_schema(test_engine):
    assert verify_database(bind=test_engine) is True


def test_verify_database_reports_missing_tables():
    assert verify_database(bind=create_engine("sqlite://")) is False


def test_create_all_tables_only_reports_new_tables():
    engine = create_engine("sqlite://")

    created = create_all_tables(bind=engine)

    assert {"users", "posts", "likes", "comments", "follows"} <= created
    assert create_all_tables(bind=engine) == set()
