import os
import tempfile

# Must point at a throwaway database before the application modules build their engine.
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(tempfile.gettempdir(), 'jot-test.db')}")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from jot.api.deps import get_db, get_email_sender, get_storage_client  # noqa: E402
from jot.db.base import Base  # noqa: E402
from jot.main import app  # noqa: E402
from jot.services.rate_limit import clear_rate_limiter  # noqa: E402


class RecordingEmailSender:
    """Stands in for the SMTP sender and keeps every message it was asked to send."""

    def __init__(self, *, configured: bool = True, error: Exception | None = None) -> None:
        self.configured = configured
        self.error = error
        self.sent: list[dict[str, str]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def send(self, *, to_email: str, subject: str, text_content: str) -> None:
        self.sent.append({"to": to_email, "subject": subject, "body": text_content})
        if self.error is not None:
            raise self.error


class RecordingStorageClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.deleted: list[str] = []

    def delete_files(self, keys) -> None:
        if self.error is not None:
            raise self.error
        self.deleted.extend(keys)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def email_sender():
    return RecordingEmailSender()


@pytest.fixture()
def storage_client():
    return RecordingStorageClient()


@pytest.fixture()
def client(session_factory, email_sender, storage_client):
    clear_rate_limiter()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_storage_client] = lambda: storage_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_rate_limiter()


@pytest.fixture()
def make_email_sender():
    return RecordingEmailSender


@pytest.fixture()
def fixed_otp(monkeypatch):
    monkeypatch.setattr("jot.services.signup.generate_otp_code", lambda: "123456")
    return "123456"


@pytest.fixture()
def signup_user(client, fixed_otp):
    """Run the three signup requests; the client keeps the session cookie afterwards."""

    def _signup(email: str = "user@example.com", password: str = "secret123", **extra) -> dict:
        assert client.post("/api/auth/send-otp", json={"email": email}).status_code == 200
        assert client.post("/api/auth/verify-otp", json={"email": email, "otp": fixed_otp}).status_code == 200
        response = client.post("/api/auth/signup", json={"email": email, "password": password, **extra})
        assert response.status_code == 201
        return response.json()

    return _signup
