"""User service: listing, full and partial updates, deletion.

Raises domain errors that route handlers map to HTTP status codes.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, assert_never

from domain.model.errors import (
    DuplicateEmailError,
    InvalidFormatError,
    NotFoundError,
    UnknownFieldError,
)
from domain.model.user import PatchField, PhoneInput, User
from port.user_repository import UserRepository
from services.auth_service import (
    check_email_format,
    check_password_format,
    hash_password,
    validate_credentials_format,
)
from services.token_service import TokenCodec
from utils.config import Settings

logger = logging.getLogger(__name__)


def list_users(repo: UserRepository) -> list[User]:
    return repo.find_all()


def find_by_email(repo: UserRepository, email: str) -> User | None:
    return repo.get_by_email(email)


def delete_user(repo: UserRepository, user_id: str) -> bool:
    """Delete a user with its phones. Return False if no such user existed."""
    deleted = repo.delete(user_id)
    if deleted:
        logger.info("User deleted", extra={"userId": user_id})
    else:
        logger.debug("Delete skipped: user not found", extra={"userId": user_id})
    return deleted


def update_user(
    repo: UserRepository,
    codec: TokenCodec,
    settings: Settings,
    user_id: str,
    name: str,
    email: str,
    password: str,
    active: bool,
    phones: Iterable[PhoneInput],
) -> User:
    """Overwrite every mutable field of a user.

    The email may stay the same; it is rejected only if another user owns it.

    Raises:
        NotFoundError: no user with this id
        DuplicateEmailError: email belongs to a different user
        InvalidFormatError: email or password does not match the configured pattern
    """
    user = _get_or_raise(repo, user_id)

    _ensure_email_available(repo, email, user.id)
    validate_credentials_format(settings, email, password)

    user.name = name
    user.email = email
    user.password_hash = hash_password(password)
    user.active = active
    user.replace_phones(phones)

    saved = _reissue_and_save(repo, codec, user)
    logger.info("User updated", extra={"userId": saved.id})
    return saved


def patch_user(
    repo: UserRepository,
    codec: TokenCodec,
    settings: Settings,
    user_id: str,
    updates: Mapping[str, Any],
) -> User:
    """Apply only the supplied fields to a user.

    The token is reissued and the modified timestamp stamped even when
    ``updates`` is empty.

    Raises:
        NotFoundError: no user with this id
        UnknownFieldError: a key is not a patchable field (nothing is changed)
        InvalidFormatError: a value has the wrong type, or fails the format
            rules when ``settings.patch_validates_format`` is on
        DuplicateEmailError: patched email belongs to a different user
            (only checked when ``settings.patch_validates_format`` is on)
    """
    user = _get_or_raise(repo, user_id)
    changes = [(_parse_field(key), value) for key, value in updates.items()]

    for patch_field, value in changes:
        _apply(repo, settings, user, patch_field, value)

    saved = _reissue_and_save(repo, codec, user)
    logger.info("User patched", extra={
        "userId": saved.id,
        "fields": [f.value for f, _ in changes],
    })
    return saved


def _get_or_raise(repo: UserRepository, user_id: str) -> User:
    user = repo.get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def _ensure_email_available(repo: UserRepository, email: str, owner_id: str) -> None:
    existing = repo.get_by_email(email)
    if existing and existing.id != owner_id:
        raise DuplicateEmailError(email)


def _reissue_and_save(repo: UserRepository, codec: TokenCodec, user: User) -> User:
    user.token = codec.issue(user.email)
    user.updated_at = datetime.now(timezone.utc)
    return repo.save(user)


def _parse_field(key: str) -> PatchField:
    try:
        return PatchField(key)
    except ValueError:
        raise UnknownFieldError(key) from None


def _expect(patch_field: PatchField, value: Any, expected: type) -> Any:
    if not isinstance(value, expected):
        raise InvalidFormatError(f"Invalid value for '{patch_field.value}'")
    return value


def _apply(
    repo: UserRepository,
    settings: Settings,
    user: User,
    patch_field: PatchField,
    value: Any,
) -> None:
    if patch_field is PatchField.NAME:
        user.name = _expect(patch_field, value, str)
    elif patch_field is PatchField.EMAIL:
        email = _expect(patch_field, value, str)
        if settings.patch_validates_format:
            _ensure_email_available(repo, email, user.id)
            check_email_format(settings, email)
        user.email = email
    elif patch_field is PatchField.PASSWORD:
        password = _expect(patch_field, value, str)
        if settings.patch_validates_format:
            check_password_format(settings, password)
        user.password_hash = hash_password(password)
    elif patch_field is PatchField.ACTIVE:
        user.active = _expect(patch_field, value, bool)
    elif patch_field is PatchField.PHONES:
        items = _expect(patch_field, value, list)
        user.replace_phones([PhoneInput.from_mapping(item) for item in items])
    else:
        assert_never(patch_field)
