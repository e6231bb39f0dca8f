# domain/model/user.py

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from domain.model.errors import InvalidFormatError


# ── Value Objects ────────────────────────────────────────


@dataclass(frozen=True)
class PhoneInput:
    """Phone number as supplied by a client, before it has an owner."""
    number: str
    city_code: str
    country_code: str

    @classmethod
    def from_mapping(cls, data: Any) -> PhoneInput:
        """Build from a raw mapping using wire names or attribute names."""
        if not isinstance(data, Mapping):
            raise InvalidFormatError("Each phone must be an object")
        values = []
        for wire_name, attr_name in (
            ('numero', 'number'),
            ('codigoCiudad', 'city_code'),
            ('codigoPais', 'country_code'),
        ):
            value = data.get(wire_name, data.get(attr_name))
            if not isinstance(value, str):
                raise InvalidFormatError(f"Phone field '{wire_name}' must be a string")
            values.append(value)
        return cls(*values)


class PatchField(str, Enum):
    """Fields a partial update may touch, keyed by their wire names."""
    NAME = 'nombre'
    EMAIL = 'correo'
    PASSWORD = 'password'
    ACTIVE = 'activo'
    PHONES = 'telefonos'

    @classmethod
    def _missing_(cls, value):
        return _PATCH_ALIASES.get(value)


_PATCH_ALIASES = {
    'name': PatchField.NAME,
    'email': PatchField.EMAIL,
    'active': PatchField.ACTIVE,
    'phones': PatchField.PHONES,
}


# ── User Domain Model ────────────────────────────────────


@dataclass
class Phone:
    """Phone number owned by exactly one user."""
    id: str
    number: str
    city_code: str
    country_code: str
    user_id: str | None = None


@dataclass
class User:
    """Domain model representing a user."""
    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime
    active: bool = True
    token: str | None = None
    updated_at: datetime | None = None
    last_login: datetime | None = None
    phones: list[Phone] = field(default_factory=list)

    @classmethod
    def create(cls, name: str, email: str, password_hash: str, now: datetime) -> User:
        """Create a new active user with a generated id and no phones."""
        return cls(
            id=uuid.uuid4().hex,
            name=name,
            email=email,
            password_hash=password_hash,
            created_at=now,
            last_login=now,
        )

    def replace_phones(self, phones: Iterable[PhoneInput]) -> list[Phone]:
        """Drop every current phone and own the given ones instead."""
        self.phones = [
            Phone(
                id=uuid.uuid4().hex,
                number=p.number,
                city_code=p.city_code,
                country_code=p.country_code,
                user_id=self.id,
            )
            for p in phones
        ]
        return self.phones
