"""Shared fixtures: in-memory database, fake media store, app and client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from spotjott.db import create_db_engine, init_db
from spotjott.deps import get_db, get_media_store
from spotjott.errors import MediaUploadError
from spotjott.main import create_app
from spotjott.media import MediaStore, MediaUpload, UploadResult
from spotjott.ratelimit import RateLimiter
from spotjott.services.auth import AuthService, RegisterData

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    b"\x00\x00\x00\rIDATx\x9cc\xf8\xff\xff?\x00\x05\xfe\x02\xfe\xa7V\xbd\xfa\x00\x00\x00\x00IEND\xaeB`\x82"
)


class RecordingMediaStore(MediaStore):
    """In-memory media store that remembers uploads and deletions."""

    def __init__(self):
        self.uploads = []
        self.deleted = []
        self.fail_uploads = False

    def upload(self, upload, folder, options=None):
        if self.fail_uploads:
            raise MediaUploadError("Failed to upload media")
        public_id = f"{folder}/{len(self.uploads) + 1}"
        self.uploads.append((public_id, upload, options))
        return UploadResult(url=f"https://media.test/{public_id}", public_id=public_id)

    def delete(self, public_id):
        if not public_id:
            return False
        self.deleted.append(public_id)
        return True


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def media():
    return RecordingMediaStore()


@pytest.fixture
def app(session_factory, media):
    app = create_app(rate_limiter=RateLimiter(max_requests=10_000, window_seconds=900), fatal_handlers=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_store] = lambda: media
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def image_upload(name="photo.png", mime_type="image/png"):
    return MediaUpload(data=PNG_BYTES, mime_type=mime_type, filename=name)


def make_user(db, email, first_name="Test", last_name="User", password="secret123"):
    """Create a user directly through the auth service. Returns (user, token)."""
    return AuthService(db).register(RegisterData(
        first_name=first_name, last_name=last_name, email=email, password=password,
    ))


def register(client, email, first_name="Test", last_name="User", password="secret123", **extra):
    """Register over HTTP. Returns (user payload, token)."""
    form = {"firstName": first_name, "lastName": last_name, "email": email, "password": password}
    form.update(extra)
    response = client.post("/api/auth/register", data=form)
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return data["user"], data["token"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def failing_commit():
    """Patch every session so COMMIT fails, as on a lost connection mid-request."""
    return patch.object(Session, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error")))


@pytest.fixture
def alice(client):
    return register(client, "alice@example.com", "Alice", "Anders")


@pytest.fixture
def bob(client):
    return register(client, "bob@example.com", "Bob", "Brown")
