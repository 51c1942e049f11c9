from datetime import datetime, timedelta, timezone

import jwt
import pytest

from placesapi.core.auth import ALGORITHM, decode_session_token, issue_session_token
from placesapi.core.errors import ConfigurationError, UnauthorizedError

USER = {"id": "u_1", "email": "a@example.com", "plan": "basic"}


def test_round_trip_claims():
    token = issue_session_token(USER)
    claims = jwt.decode(token, "test-secret", algorithms=[ALGORITHM])
    assert claims["userId"] == "u_1"
    assert claims["email"] == "a@example.com"
    assert claims["plan"] == "basic"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600

    session = decode_session_token(token)
    assert (session.user_id, session.email, session.plan) == ("u_1", "a@example.com", "basic")


def test_expired_token():
    token = issue_session_token(USER, now=datetime.now(timezone.utc) - timedelta(days=8))
    with pytest.raises(UnauthorizedError) as exc:
        decode_session_token(token)
    assert exc.value.message == "Token expired"


def test_tampered_and_foreign_tokens():
    token = issue_session_token(USER, secret="other-secret")
    with pytest.raises(UnauthorizedError):
        decode_session_token(token)
    with pytest.raises(UnauthorizedError):
        decode_session_token("not.a.jwt")


def test_token_without_identity_rejected():
    token = jwt.encode({"exp": datetime.now(timezone.utc) + timedelta(hours=1)}, "test-secret", algorithm=ALGORITHM)
    with pytest.raises(UnauthorizedError):
        decode_session_token(token)


def test_missing_secret(monkeypatch):
    from placesapi.core.config import settings

    monkeypatch.setattr(settings, "JWT_SECRET", None)
    with pytest.raises(ConfigurationError):
        issue_session_token(USER)
