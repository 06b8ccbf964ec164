import os

from cryptography.fernet import Fernet

# Settings are read at import time, so configure before importing the app
os.environ.setdefault("WC_ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ["WC_DATABASE_URL"] = "sqlite://"

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, create_engine  # noqa: E402
from starlette.testclient import TestClient  # noqa: E402

from warrantycheck.database import create_db_and_tables, get_session  # noqa: E402
from warrantycheck.main import app  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def sent_codes():
    """Capture OTP mail instead of sending it; maps email -> last code."""
    codes: dict[str, str] = {}

    def _fake_send(email, code):
        codes[email] = code
        return True

    with patch("warrantycheck.services.mailer.send_otp_email", side_effect=_fake_send):
        yield codes


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client, sent_codes):
    """Log `email` in through the API and return auth headers."""

    def _login(email: str = "ops@example.com") -> dict[str, str]:
        resp = client.post("/api/auth/login", json={"email": email})
        assert resp.status_code == 202
        resp = client.post("/api/auth/verify", json={"email": email, "code": sent_codes[email]})
        assert resp.status_code == 200
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _login
