"""Pydantic models for API request/response.

Wire names follow the public API (``nombre``, ``correo``, ``telefonos``...);
request models also accept the Python attribute names.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from domain.model.user import PhoneInput, User


class PhoneRequest(BaseModel):
    """Phone number attached to a user."""
    model_config = ConfigDict(populate_by_name=True)

    number: str = Field(..., alias="numero", description="Phone number")
    city_code: str = Field(..., alias="codigoCiudad", description="City code")
    country_code: str = Field(..., alias="codigoPais", description="Country code")

    def to_domain(self) -> PhoneInput:
        return PhoneInput(number=self.number, city_code=self.city_code, country_code=self.country_code)


class CreateUserRequest(BaseModel):
    """Request model for user registration."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="nombre", description="Display name")
    email: str = Field(..., alias="correo", description="Email, used as login identifier")
    password: str = Field(..., description="Plaintext password")
    phones: list[PhoneRequest] = Field(default_factory=list, alias="telefonos")

    def phone_inputs(self) -> list[PhoneInput]:
        return [p.to_domain() for p in self.phones]


class UpdateUserRequest(CreateUserRequest):
    """Request model for a full user update."""
    active: bool = Field(True, alias="activo", description="Whether the account is active")


class LoginRequest(BaseModel):
    """Request model for user login."""
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., alias="correo")
    password: str


class UserResponse(BaseModel):
    """Externally visible projection of a user (no password digest, no phones)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="User ID")
    name: str = Field(..., alias="nombre")
    email: str = Field(..., alias="correo")
    created_at: datetime = Field(..., alias="creado", description="Registration timestamp")
    updated_at: Optional[datetime] = Field(None, alias="modificado", description="Last update timestamp")
    last_login: Optional[datetime] = Field(None, alias="ultimoLogin", description="Last login timestamp")
    token: Optional[str] = Field(None, description="Most recently issued bearer token")
    active: bool = Field(..., alias="isActive")

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
            last_login=user.last_login,
            token=user.token,
            active=user.active,
        )
