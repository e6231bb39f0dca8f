"""In-memory implementation of UserRepository for testing."""

import copy

from domain.model.errors import DuplicateEmailError, NotFoundError
from domain.model.user import Phone, User


class FakeUserRepository:
    """Stores deep copies so callers only see changes they explicitly save."""

    def __init__(self):
        self.store: dict[str, User] = {}

    def _email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        return any(u.email == email and u.id != exclude_id for u in self.store.values())

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User:
        if self._email_taken(user.email):
            raise DuplicateEmailError(user.email)
        self.store[user.id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    def save(self, user: User) -> User:
        if user.id not in self.store:
            raise NotFoundError("User not found")
        if self._email_taken(user.email, exclude_id=user.id):
            raise DuplicateEmailError(user.email)
        self.store[user.id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    def save_phones(self, user_id: str, phones: list[Phone]) -> bool:
        user = self.store.get(user_id)
        if not user:
            return False
        user.phones = copy.deepcopy(phones)
        return True

    def delete(self, user_id: str) -> bool:
        return self.store.pop(user_id, None) is not None

    # ── read operations ──────────────────────────────────────

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return copy.deepcopy(user) if user else None

    def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return copy.deepcopy(user)
        return None

    def exists_by_email(self, email: str) -> bool:
        return self._email_taken(email)

    def find_all(self) -> list[User]:
        return [copy.deepcopy(u) for u in self.store.values()]
