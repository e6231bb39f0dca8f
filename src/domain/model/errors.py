"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Route handlers catch them and map to appropriate HTTP status codes.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""


class ValidationError(DomainError):
    """Input violates a business validation rule."""


class DuplicateEmailError(DuplicateError):
    """Another user is already registered with this email."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class InvalidFormatError(ValidationError):
    """Email, password or field value does not match the configured format."""


class UnknownFieldError(ValidationError):
    """Partial update named a field that cannot be patched."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Unknown field: {field}")


class UnknownUserError(NotFoundError):
    """Login attempted for an email with no user record."""


class InvalidCredentialsError(DomainError):
    """Password does not match the stored digest."""


class InvalidTokenError(DomainError):
    """Bearer token is malformed or its signature does not verify."""
