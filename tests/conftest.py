"""Pytest configuration and fixtures."""

import os
import threading

# Must be set before listing_admin.core.config builds its Settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_PASSWORD"] = "open-sesame"
os.environ["SECRET_KEY"] = "test-signing-key"
os.environ["UPLOAD_WORKERS"] = "3"
os.environ["PUBLIC_ORIGINS"] = "https://www.example.com"
os.environ["ADMIN_ORIGINS"] = "https://admin.example.com"

from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from listing_admin.core.deps import get_object_store
from listing_admin.core.exceptions import StorageWriteError
from listing_admin.db.session import get_db, init_models
from listing_admin.main import app
from listing_admin.services.images import ImageIngestor, UploadedFile
from listing_admin.services.properties import PropertyService
from listing_admin.services.records import PropertyStore

ADMIN_PASSWORD = "open-sesame"
BUCKET = "property-images"


class InMemoryObjectStore:
    """Dict-backed stand-in for the S3 bucket."""

    base = "https://cdn.test"

    def __init__(self) -> None:
        self.objects: dict = {}
        self.removed: list = []
        self.fail_on: set = set()  # filenames whose upload should fail
        self._lock = threading.Lock()

    def put(self, bucket, key, data, content_type, upsert=True):
        if any(key.endswith(name) for name in self.fail_on):
            raise StorageWriteError(f"Upload of {key!r} failed")
        with self._lock:
            if not upsert and (bucket, key) in self.objects:
                raise StorageWriteError(f"{key!r} already exists")
            self.objects[(bucket, key)] = (data, content_type)

    def public_url(self, bucket, key):
        return f"{self.base}/{bucket}/{key}"

    def key_for_url(self, bucket, url):
        prefix = f"{self.base}/{bucket}/"
        return url[len(prefix):] if url and url.startswith(prefix) else None

    def remove(self, bucket, keys):
        for key in keys:
            self.objects.pop((bucket, key), None)
            self.removed.append(key)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_models(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db_session(engine) -> Iterator[Session]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def ingestor(object_store) -> ImageIngestor:
    return ImageIngestor(object_store, bucket=BUCKET, max_workers=3)


@pytest.fixture
def service(db_session, ingestor) -> PropertyService:
    return PropertyService(PropertyStore(db_session), ingestor)


@pytest.fixture
def client(engine, object_store) -> Iterator[TestClient]:
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_object_store] = lambda: object_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client) -> dict:
    resp = client.post("/api/login", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def image(name: str, data: bytes = b"\xff\xd8\xff fake jpeg") -> UploadedFile:
    return UploadedFile(data=data, filename=name, content_type="image/jpeg")
