"""Pytest fixtures for the Snapgram API."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["LOCALE"] = "en"
os.environ["STORAGE_ENDPOINT"] = ""

import uuid
from datetime import datetime, timedelta
from typing import Iterator, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.db.base  # noqa: F401
from app.core.storage import StorageError, get_storage
from app.db.session import Base, build_engine, get_db
from app.main import create_app
from app.modules.posts.models.post import Post
from app.modules.user_management.models.user import User


class FakeStorage:
    """In-memory stand-in for the S3 bucket that records every call"""

    public_url = "https://cdn.example.test"

    def __init__(self) -> None:
        self.objects: dict = {}
        self.calls: list = []
        self.fail_upload = False
        self.fail_delete = False

    def upload_bytes(self, key: str, body: bytes, content_type: str) -> None:
        self.calls.append(("upload", key))
        if self.fail_upload:
            raise StorageError("upload rejected")
        self.objects[key] = (body, content_type)

    def get_public_url(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        prefix = f"{self.public_url}/"
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    def read_object(self, key: str):
        return self.objects.get(key)

    def delete_object(self, key: str) -> None:
        self.calls.append(("delete", key))
        if self.fail_delete:
            raise StorageError("delete rejected")
        self.objects.pop(key, None)


@pytest.fixture(scope="session")
def test_engine():
    """In-memory SQLite shared across threads, with the full schema"""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="session")
def session_maker(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(autouse=True)
def clean_database(session_maker) -> Iterator[None]:
    """Clear tables before each test to guarantee isolation."""
    with session_maker() as session:
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
    yield


@pytest.fixture()
def db_session(session_maker) -> Iterator[Session]:
    """Provide a raw database session to tests."""
    with session_maker() as session:
        yield session


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def app(session_maker, storage) -> Iterator[FastAPI]:
    """Create the FastAPI app with the test database and fake storage."""
    application = create_app(create_tables=False)

    def override_get_db():
        db = session_maker()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_storage] = lambda: storage
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(uid: str) -> dict:
    """Bearer header accepted in the development environment for ``uid``"""
    return {"Authorization": f"Bearer dev:{uid}"}


@pytest.fixture()
def make_user(db_session: Session):
    def _make_user(external_id: Optional[str] = None, name: Optional[str] = None) -> User:
        external_id = external_id or f"uid_{uuid.uuid4().hex[:8]}"
        user = User(id=str(uuid.uuid4()), external_id=external_id, name=name or external_id)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def make_post(db_session: Session):
    base_time = datetime(2026, 1, 1, 12, 0, 0)
    counter = {"n": 0}

    def _make_post(owner: User, caption: Optional[str] = None, created_at: Optional[datetime] = None) -> Post:
        counter["n"] += 1
        created = created_at or base_time + timedelta(minutes=counter["n"])
        post = Post(
            id=str(uuid.uuid4()),
            user_id=owner.id,
            image_url=f"{FakeStorage.public_url}/{owner.external_id}/{counter['n']}.jpg",
            caption=caption,
            created_at=created,
            updated_at=created,
        )
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make_post
