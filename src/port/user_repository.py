from typing import Protocol

from domain.model.user import Phone, User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Phones live inside their owner's record: deleting a user deletes its phones.
    Unique-email violations raise DuplicateEmailError; any other storage fault
    propagates to the caller.
    """
    def create(self, user: User) -> User:
        """Insert a new user and return it as stored."""
        ...

    def save(self, user: User) -> User:
        """Overwrite the stored record with the same id. Raise NotFoundError if it is gone."""
        ...

    def save_phones(self, user_id: str, phones: list[Phone]) -> bool:
        """Replace the phones of a user. Return True if the user exists."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def exists_by_email(self, email: str) -> bool:
        """Return True if any user is registered with this email."""
        ...

    def find_all(self) -> list[User]:
        """Return every user in insertion order."""
        ...

    def delete(self, user_id: str) -> bool:
        """Delete a user and its phones. Return True if a record was removed."""
        ...
