"""Auth service: registration, login and password hashing.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.
"""

import logging
import re
from collections.abc import Iterable
from datetime import datetime, timezone

import bcrypt

from domain.model.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidFormatError,
    UnknownUserError,
)
from domain.model.user import PhoneInput, User
from port.user_repository import UserRepository
from services.token_service import TokenCodec
from utils.config import Settings

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12
# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Raises:
        InvalidFormatError: password is longer than MAX_PASSWORD_BYTES once UTF-8 encoded
    """
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise InvalidFormatError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except ValueError:
        # Stored digest is not a bcrypt hash
        return False


def check_email_format(settings: Settings, email: str) -> None:
    if not re.fullmatch(settings.email_regex, email):
        raise InvalidFormatError("Invalid email format")


def check_password_format(settings: Settings, password: str) -> None:
    if not re.fullmatch(settings.password_regex, password):
        raise InvalidFormatError("Invalid password format")


def validate_credentials_format(settings: Settings, email: str, password: str) -> None:
    """Raise InvalidFormatError unless both email and password match their patterns."""
    check_email_format(settings, email)
    check_password_format(settings, password)


def register(
    repo: UserRepository,
    codec: TokenCodec,
    settings: Settings,
    name: str,
    email: str,
    password: str,
    phones: Iterable[PhoneInput] = (),
) -> User:
    """Register a new user.

    Returns the created User domain object, with its token and phones.

    Raises:
        DuplicateEmailError: email already registered
        InvalidFormatError: email or password does not match the configured pattern
    """
    if repo.exists_by_email(email):
        raise DuplicateEmailError(email)

    validate_credentials_format(settings, email, password)

    user = User.create(
        name=name,
        email=email,
        password_hash=hash_password(password),
        now=datetime.now(timezone.utc),
    )
    user.token = codec.issue(email)

    saved = repo.create(user)
    if saved.replace_phones(phones):
        repo.save_phones(saved.id, saved.phones)

    logger.info("User registered", extra={"userId": saved.id, "email": email, "phones": len(saved.phones)})
    return saved


def authenticate(repo: UserRepository, email: str, password: str) -> User:
    """Check an email/password pair against the stored bcrypt digest.

    Raises:
        UnknownUserError: no user with this email
        InvalidCredentialsError: password does not match
    """
    user = repo.get_by_email(email)
    if not user:
        raise UnknownUserError("User not found")

    if not verify_password(password, user.password_hash):
        logger.warning("Login rejected: bad credentials", extra={"userId": user.id})
        raise InvalidCredentialsError("Invalid credentials")
    return user


def login(repo: UserRepository, codec: TokenCodec, email: str, password: str) -> User:
    """Authenticate, stamp last login and hand out a fresh token.

    Raises:
        UnknownUserError: no user with this email
        InvalidCredentialsError: password does not match
    """
    user = authenticate(repo, email, password)

    user.last_login = datetime.now(timezone.utc)
    user.token = codec.issue(user.email)
    saved = repo.save(user)

    logger.info("User logged in", extra={"userId": saved.id, "email": email})
    return saved
