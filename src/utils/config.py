"""Runtime settings read from environment variables."""

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_JWT_EXPIRATION_SECONDS = 1440  # 1000 * 60 * 24 ms
DEFAULT_EMAIL_REGEX = r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"
# At least 8 characters with one uppercase letter, one lowercase letter and one digit
DEFAULT_PASSWORD_REGEX = r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}$"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read-only after startup."""
    jwt_secret_key: str
    jwt_expiration_seconds: int = DEFAULT_JWT_EXPIRATION_SECONDS
    email_regex: str = DEFAULT_EMAIL_REGEX
    password_regex: str = DEFAULT_PASSWORD_REGEX
    # Partial updates skip format checks unless enabled
    patch_validates_format: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from the environment once per process.

    Raises:
        ValueError: JWT_SECRET_KEY is missing or JWT_EXPIRATION_SECONDS is not a positive integer
    """
    secret = os.getenv("JWT_SECRET_KEY")
    if not secret:
        raise ValueError(
            "JWT_SECRET_KEY environment variable is required. "
            "Generate a secure key with: openssl rand -hex 32"
        )

    expiration = int(os.getenv("JWT_EXPIRATION_SECONDS", DEFAULT_JWT_EXPIRATION_SECONDS))
    if expiration <= 0:
        raise ValueError("JWT_EXPIRATION_SECONDS must be a positive integer")

    return Settings(
        jwt_secret_key=secret,
        jwt_expiration_seconds=expiration,
        email_regex=os.getenv("EMAIL_REGEX", DEFAULT_EMAIL_REGEX),
        password_regex=os.getenv("PASSWORD_REGEX", DEFAULT_PASSWORD_REGEX),
        patch_validates_format=_env_bool("PATCH_VALIDATES_FORMAT", False),
    )
