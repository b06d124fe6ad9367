"""
Shared pytest fixtures.

Uses a file-backed SQLite database so no Postgres is required for tests.
Tables live for the whole session, so tests that depend on totals or
unread counts create their own users (`make_user`) or use isolated weeks.
"""
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db.base import Base, enable_sqlite_foreign_keys, get_db
from app.main import app
from app.models.user import User
from app.services.images import ImageStore, get_image_store

SQLITE_URL = "sqlite:///./test_tally.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_DEFAULT_USERS = [
    ("tekta",   "Tekta",   "Shefafit", "males"),
    ("yihun",   "Yihun",   "Shebeto",  "females"),
    ("yeabsra", "Yeabsra", "Faraw",    "observer"),
]


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        for user_id, name, love_name, track in _DEFAULT_USERS:
            db.add(User(id=user_id, name=name, love_name=love_name, track=track))
        db.commit()
    finally:
        db.close()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def make_user(db):
    """Factory for throwaway users with unique ids."""
    def _make(name: str = "Tester", track: str = "observer") -> User:
        user = User(
            id=f"u-{uuid.uuid4().hex[:12]}",
            name=name,
            love_name=f"{name} love",
            track=track,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


class FakeUploader:
    """Stands in for cloudinary.uploader; records every call."""

    def __init__(self):
        self.uploads: list[str] = []
        self.destroyed: list[str] = []
        self.fail_destroy = False
        self.fail_upload = False
        self.destroy_result = "ok"

    def upload(self, file, **options):
        if self.fail_upload:
            raise RuntimeError("provider exploded")
        self.uploads.append(file)
        public_id = f"{options['folder']}/img{len(self.uploads)}"
        return {
            "public_id": public_id,
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/v1700000000/{public_id}.png",
        }

    def destroy(self, public_id, **options):
        if self.fail_destroy:
            raise TimeoutError("provider timed out")
        self.destroyed.append(public_id)
        return {"result": self.destroy_result}


@pytest.fixture()
def fake_uploader(monkeypatch):
    fake = FakeUploader()
    monkeypatch.setattr("cloudinary.uploader.upload", fake.upload)
    monkeypatch.setattr("cloudinary.uploader.destroy", fake.destroy)
    return fake


@pytest.fixture()
def image_store(fake_uploader):
    return ImageStore(
        cloud_name="demo",
        api_key="key",
        api_secret="secret",
        folder="weekly-tally",
        timeout=5.0,
    )


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def client_with_images(client, image_store):
    app.dependency_overrides[get_image_store] = lambda: image_store
    yield client
