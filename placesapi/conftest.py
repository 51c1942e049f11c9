# placesapi/conftest.py
import json
import os

import pytest

# Must be set before placesapi.main is imported anywhere
os.environ.setdefault("SKIP_ENV_VALIDATION", "1")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")

from placesapi.core.config import settings  # noqa: E402
from placesapi.features.accounts.service import hash_password  # noqa: E402
from placesapi.features.storage.store import RecordStore  # noqa: E402
from placesapi.tests.mocks import (  # noqa: E402
    FakeCityGenerator,
    FakeCompletionClient,
    FakeGeocoder,
    FakeMailer,
    FakePaymentProvider,
)

TEST_SECRET = "test-secret"


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """
    Point every store at a fresh temporary DATA_DIR.

    Also pins the signing key and uses the cheapest bcrypt cost so
    signup/login tests stay fast.
    """
    root = tmp_path / "data"
    (root / "countries").mkdir(parents=True)
    monkeypatch.setattr(settings, "DATA_DIR", str(root))
    monkeypatch.setattr(settings, "JWT_SECRET", TEST_SECRET)
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(settings, "PAYPAL_MERCHANT_ID", None)
    monkeypatch.setattr(settings, "PAYMENT_CURRENCY", "EUR")
    monkeypatch.setattr(settings, "CLIENT_URL", "http://client.test")
    return root


@pytest.fixture
def account_store(data_dir):
    return RecordStore(data_dir)


@pytest.fixture
def country_store(data_dir):
    return RecordStore(data_dir / "countries")


@pytest.fixture
def write_country(data_dir):
    """Write a country file: write_country("france.json", "France", [{"name": "Paris"}])."""

    def _write(file, name, cities=None):
        path = data_dir / "countries" / file
        path.write_text(json.dumps({"name": name, "cities": cities or []}), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_user(account_store):
    """Insert a confirmed user into users.json and return its record."""

    def _make(name="alice", email="alice@example.com", password="pw-123456", plan="free", tokens=0):
        users = account_store.read("users.json", [])
        record = {
            "id": f"u_{len(users) + 1:016d}",
            "name": name,
            "email": email,
            "passwordHash": hash_password(password),
            "plan": plan,
            "tokens": tokens,
        }
        users.append(record)
        account_store.write("users.json", users)
        return record

    return _make


@pytest.fixture
def auth_headers():
    """Authorization header for a user record (or a plain dict with id/email/plan)."""
    from placesapi.core.auth import issue_session_token

    def _headers(user):
        return {"Authorization": f"Bearer {issue_session_token(user)}"}

    return _headers


@pytest.fixture
def fakes():
    class Fakes:
        generator = FakeCityGenerator()
        completion = FakeCompletionClient()
        geocoder = FakeGeocoder()
        provider = FakePaymentProvider()
        mailer = FakeMailer()

    return Fakes()


@pytest.fixture
def client(fakes):
    """TestClient with every outbound collaborator replaced by a fake."""
    from fastapi.testclient import TestClient

    from placesapi.api import deps
    from placesapi.main import app

    app.dependency_overrides[deps.get_city_generator] = lambda: fakes.generator
    app.dependency_overrides[deps.get_completion_client] = lambda: fakes.completion
    app.dependency_overrides[deps.get_geocoder] = lambda: fakes.geocoder
    app.dependency_overrides[deps.get_payment_provider] = lambda: fakes.provider
    app.dependency_overrides[deps.get_mailer] = lambda: fakes.mailer
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
