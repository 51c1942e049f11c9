"""
Session tokens for the Places API.

Issues and validates HS256 JWTs carrying {userId, email, plan}
and exposes the current session as a FastAPI dependency.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import jwt
from fastapi import Request
from pydantic import BaseModel, ConfigDict

from placesapi.core.config import settings
from placesapi.core.errors import ConfigurationError, UnauthorizedError

logger = logging.getLogger("placesapi")

ALGORITHM = "HS256"


class Session(BaseModel):
    """Identity and plan decoded from a verified session token."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    plan: str = "free"


def _secret(secret: Optional[str] = None) -> str:
    key = secret or settings.JWT_SECRET
    if not key:
        raise ConfigurationError("JWT_SECRET is not configured")
    return key


def issue_session_token(user: dict, *, secret: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """Sign a session token for a user record (expects id, email, plan)."""
    issued = now or datetime.now(timezone.utc)
    payload = {
        "userId": user["id"],
        "email": user["email"],
        "plan": user.get("plan") or "free",
        "iat": issued,
        "exp": issued + timedelta(days=settings.SESSION_TTL_DAYS),
    }
    return jwt.encode(payload, _secret(secret), algorithm=ALGORITHM)


def decode_session_token(token: str, *, secret: Optional[str] = None) -> Session:
    """
    Verify signature and expiry of a session token.

    Raises:
        UnauthorizedError: token expired, tampered or malformed
        ConfigurationError: no signing key configured
    """
    key = _secret(secret)
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "userId", "email"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        raise UnauthorizedError("Invalid token")

    return Session(
        user_id=str(payload["userId"]),
        email=str(payload["email"]),
        plan=str(payload.get("plan") or "free"),
    )


async def get_current_session(request: Request) -> Session:
    """
    Resolve the caller's session from the Authorization header.

    Raises:
        UnauthorizedError 401: missing or invalid bearer token
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise UnauthorizedError("Missing Authorization (Bearer token)")

    session = decode_session_token(auth_header[7:].strip())
    request.state.user_id = session.user_id
    return session
