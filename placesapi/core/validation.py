"""
Environment validation utilities.

Ensures the API fails fast on misconfiguration while
remaining bypassable for tests via SKIP_ENV_VALIDATION.
"""

import os
from typing import Optional, Iterable
from urllib.parse import urlparse

from placesapi.core.config import settings


class EnvValidationError(RuntimeError):
    """Raised when environment validation fails."""


def _is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return bool(parsed.scheme in ("http", "https") and parsed.netloc)


def _require(vars_required: Iterable[str], source: object) -> None:
    for var in vars_required:
        if not getattr(source, var, None):
            raise EnvValidationError(f"{var} is required in production")


def validate_env(env: Optional[str] = None, settings_obj=None) -> bool:
    """Validate environment configuration.

    Args:
        env: Override environment name (defaults to settings.ENV)
        settings_obj: Override settings object (defaults to placesapi.core.config.settings)

    Returns:
        True if validation passes.

    Raises:
        EnvValidationError when a rule is violated.
    """
    if os.getenv("SKIP_ENV_VALIDATION") == "1":
        return True

    cfg = settings_obj or settings
    mode = (env or getattr(cfg, "ENV", "development") or "development").lower()

    for key in ("PAYPAL_BASE_URL", "GEOCODER_BASE_URL", "CLIENT_URL"):
        value = getattr(cfg, key, None)
        if value and not _is_valid_url(value):
            raise EnvValidationError(f"{key} must be an http(s) URL")

    # Session tokens cannot be issued without a signing key, in any environment
    if not getattr(cfg, "JWT_SECRET", None):
        raise EnvValidationError("JWT_SECRET is required")

    required_prod = [
        "JWT_SECRET",
        "GROQ_API_KEY",
        "PAYPAL_CLIENT_ID",
        "PAYPAL_CLIENT_SECRET",
    ]

    if mode == "production":
        _require(required_prod, cfg)
        if "sandbox" in (getattr(cfg, "PAYPAL_BASE_URL", "") or ""):
            raise EnvValidationError("PAYPAL_BASE_URL must not point at the sandbox in production")

    rounds = getattr(cfg, "BCRYPT_ROUNDS", 10)
    if rounds < 10:
        raise EnvValidationError("BCRYPT_ROUNDS must be at least 10")

    return True
