import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable

# Settings are read at import time; point them at a throwaway SQLite file
# and test secrets before the app is imported.
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.mkdtemp(), "steadfast_test.db")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("COACH_ACCESS_CODE", "LET-ME-COACH")
os.environ.setdefault("CRON_SECRET", "cron-test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from app.core import storage_utils
from app.core.clock import FixedClock, get_clock
from app.database import engine
from app.main import app as fastapi_app

API = "/api/v1"

# Wednesday 2025-02-12, 10:00 in Los Angeles
DEFAULT_NOW = datetime(2025, 2, 12, 18, 0, tzinfo=timezone.utc)


def make_token(
    user_id: uuid.UUID,
    email: str,
    metadata: dict | None = None,
) -> str:
    payload = {
        "sub": str(user_id),
        "email": email,
        "user_metadata": metadata or {},
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(payload, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


class FakeBucket:
    """Stands in for the Supabase storage bucket API."""

    def __init__(self) -> None:
        self.missing = False
        self.uploads: list[str] = []
        self.downloads: list[str] = []

    def create_signed_upload_url(self, path: str) -> dict:
        if self.missing:
            raise RuntimeError("Bucket not found")
        self.uploads.append(path)
        return {"signedUrl": f"https://storage.test/upload/{path}?token=t", "token": "t"}

    def create_signed_url(self, path: str, expires_in: int) -> dict:
        self.downloads.append(path)
        return {"signedURL": f"https://storage.test/object/{path}?ttl={expires_in}"}


@pytest.fixture(autouse=True)
def reset_db():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def clock():
    fixed = FixedClock(DEFAULT_NOW)
    fastapi_app.dependency_overrides[get_clock] = lambda: fixed
    yield fixed
    fastapi_app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
def client(clock) -> TestClient:
    return TestClient(fastapi_app)


@pytest.fixture
def db_session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def bucket(monkeypatch) -> FakeBucket:
    fake = FakeBucket()
    monkeypatch.setattr(storage_utils, "_bucket", lambda: fake)
    return fake


@pytest.fixture
def sent_emails(monkeypatch) -> list[dict]:
    from app.core import email_client

    outbox: list[dict] = []

    def _send(to_email, subject, text_body, html_body=None):
        outbox.append({"to": to_email, "subject": subject, "text": text_body})

    monkeypatch.setattr(email_client, "send_email", _send)
    return outbox


@pytest.fixture
def signup(client: TestClient) -> Callable[..., dict]:
    """
    Provision a user through the API and return their headers and profile.
    """

    def _signup(
        email: str,
        role: str = "client",
        name: str | None = None,
        tz: str | None = None,
    ) -> dict:
        metadata: dict = {"role": role}
        if name:
            metadata["name"] = name
        if tz:
            metadata["timezone"] = tz
        user_id = uuid.uuid4()
        headers = {"Authorization": f"Bearer {make_token(user_id, email, metadata)}"}
        res = client.get(f"{API}/users/me", headers=headers)
        assert res.status_code == 200, res.text
        return {"id": str(user_id), "headers": headers, "profile": res.json()}

    return _signup


@pytest.fixture
def coach(signup) -> dict:
    return signup("coach.anna@fitmail.com", role="coach", name="Anna")


@pytest.fixture
def connect(client: TestClient) -> Callable[[dict, dict], dict]:
    def _connect(client_user: dict, coach_user: dict) -> dict:
        res = client.post(
            f"{API}/connections",
            json={"coach_code": coach_user["profile"]["coach_code"]},
            headers=client_user["headers"],
        )
        assert res.status_code == 201, res.text
        return res.json()

    return _connect


@pytest.fixture
def athlete(signup, connect, coach) -> dict:
    """A client already connected to `coach`."""
    user = signup("ben.client@fitmail.com", name="Ben")
    user["link"] = connect(user, coach)
    return user
