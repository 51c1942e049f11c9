"""
Account domain service.
- request_signup(): pending signup + confirmation mail
- confirm_signup(): promote a pending signup to a user (single use)
- login(), get_profile(), name_available()

Users live in users.json, pending signups in pending_users.json.
Name and email must be unique across both files.
"""

import secrets
import smtplib
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple
from uuid import uuid4

import bcrypt

from placesapi.core.auth import Session, issue_session_token
from placesapi.core.config import settings
from placesapi.core.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    UpstreamUnavailableError,
    ValidationError,
)
from placesapi.core.logging import log_event
from placesapi.core.normalize import normalize_email, normalize_user_name
from placesapi.features.mail.service import Mailer, send_signup_confirmation
from placesapi.features.storage.store import RecordStore
from placesapi.models.user import PendingSignup, User, coerce_tokens

USERS_FILE = "users.json"
PENDING_FILE = "pending_users.json"


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Constant-time bcrypt check; malformed hashes never verify."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _records(store: RecordStore, name: str) -> list:
    records = store.read(name, [])
    return [record for record in records if isinstance(record, dict)] if isinstance(records, list) else []


def _name_taken(records: list, normalized_name: str) -> bool:
    return any(normalize_user_name(record.get("name")) == normalized_name for record in records)


def _email_taken(records: list, normalized_email: str) -> bool:
    return any(normalize_email(record.get("email")) == normalized_email for record in records)


def name_available(store: RecordStore, name: Optional[str]) -> bool:
    normalized = normalize_user_name(name)
    if not normalized:
        raise ValidationError("Name is required.")
    return not (
        _name_taken(_records(store, USERS_FILE), normalized)
        or _name_taken(_records(store, PENDING_FILE), normalized)
    )


def request_signup(
    store: RecordStore,
    mailer: Mailer,
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    confirm_url_for: Callable[[str], str],
) -> PendingSignup:
    """
    Queue a signup and mail its confirmation link.

    The pending entry is removed again if the mail cannot be sent.

    Raises:
        ValidationError: missing name, email or password
        ConflictError: email or name already used by a user or pending signup
        ConfigurationError: mail transport not configured
        UpstreamUnavailableError: mail delivery failed
    """
    if not name or not email or not password:
        raise ValidationError("Name, email, and password required")

    normalized_name = normalize_user_name(name)
    if not normalized_name:
        raise ValidationError("Name is required.")
    normalized_email = normalize_email(email)

    mailer.ensure_configured()

    with store.locked(USERS_FILE, PENDING_FILE):
        users = _records(store, USERS_FILE)
        if _email_taken(users, normalized_email):
            raise ConflictError("User already exists.")
        if _name_taken(users, normalized_name):
            raise ConflictError("Name already exists.")

        pending = _records(store, PENDING_FILE)
        if _email_taken(pending, normalized_email):
            raise ConflictError("Signup already pending. Check your email to confirm.")
        if _name_taken(pending, normalized_name):
            raise ConflictError("Name already exists.")

        entry = PendingSignup(
            id=f"u_{uuid4().hex[:16]}",
            name=normalized_name,
            email=normalized_email,
            password_hash=hash_password(password),
            plan="free",
            token=secrets.token_hex(32),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        pending.append(entry.to_record())
        store.write(PENDING_FILE, pending)

    try:
        send_signup_confirmation(mailer, normalized_email, confirm_url_for(entry.token))
    except Exception as e:
        _discard_pending(store, entry.token)
        log_event("error", "signup.mail_failed", user_id=entry.id, event_type="signup.rolled_back",
                  error_code=type(e).__name__)
        if isinstance(e, (smtplib.SMTPException, OSError)):
            raise UpstreamUnavailableError("Failed to send confirmation email.") from e
        raise

    log_event("info", "signup.pending", user_id=entry.id, event_type="signup.pending")
    return entry


def _discard_pending(store: RecordStore, token: str) -> None:
    with store.locked(PENDING_FILE):
        pending = _records(store, PENDING_FILE)
        remaining = [record for record in pending if record.get("token") != token]
        if len(remaining) != len(pending):
            store.write(PENDING_FILE, remaining)


def confirm_signup(store: RecordStore, token: Optional[str]) -> Tuple[User, str]:
    """
    Consume a confirmation token and return the confirmed user and a session token.

    Idempotent on the user side: an existing user with the same email
    is returned instead of creating a duplicate.

    Raises:
        NotFoundError: unknown or already used token
    """
    if not token:
        raise NotFoundError("Invalid or expired token.")

    with store.locked(USERS_FILE, PENDING_FILE):
        pending = _records(store, PENDING_FILE)
        index = next(
            (i for i, record in enumerate(pending) if secrets.compare_digest(str(record.get("token", "")).encode("utf-8"), token.encode("utf-8"))),
            None,
        )
        if index is None:
            raise NotFoundError("Invalid or expired token.")

        entry = PendingSignup.model_validate(pending.pop(index))
        store.write(PENDING_FILE, pending)

        users = _records(store, USERS_FILE)
        existing = next(
            (record for record in users if normalize_email(record.get("email")) == normalize_email(entry.email)),
            None,
        )
        if existing is not None:
            user = User.model_validate(existing)
        else:
            user = entry.to_user()
            users.append(user.to_record())
            store.write(USERS_FILE, users)
            log_event("info", "signup.confirmed", user_id=user.id, event_type="signup.confirmed")

    return user, issue_session_token(user.to_record())


def login(store: RecordStore, identifier: Optional[str], password: Optional[str]) -> Tuple[User, str]:
    """
    Authenticate by name or email.

    Raises:
        ValidationError: missing identifier or password
        UnauthorizedError: no such user or wrong password
    """
    if not identifier or not password:
        raise ValidationError("Username or email and password required")

    normalized_name = normalize_user_name(identifier)
    normalized_email = normalize_email(identifier)
    record = next(
        (
            record
            for record in _records(store, USERS_FILE)
            if normalize_user_name(record.get("name")) == normalized_name
            or normalize_email(record.get("email")) == normalized_email
        ),
        None,
    )
    if record is None or not verify_password(password, record.get("passwordHash")):
        raise UnauthorizedError("Invalid credentials")

    user = User.model_validate(record)
    return user, issue_session_token(user.to_record())


def get_profile(store: RecordStore, session: Session) -> dict:
    match = next(
        (record for record in _records(store, USERS_FILE) if record.get("id") == session.user_id),
        None,
    )
    tokens = coerce_tokens(match.get("tokens")) if match else 0
    return {
        "userId": session.user_id,
        "name": (match or {}).get("name", ""),
        "email": session.email,
        "plan": session.plan,
        "tokens": tokens,
    }
