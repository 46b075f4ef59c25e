"""In-memory implementation of UserRepository for testing."""

import copy
import itertools
from datetime import datetime

from domain.model.errors import ConflictError
from domain.model.user import Phone, User


class FakeUserRepository:
    """Keeps deep copies so callers never mutate stored state behind its back."""

    def __init__(self):
        self.store: dict[str, User] = {}
        self.phones: dict[int, Phone] = {}
        self._phone_ids = itertools.count(1)

    # ── write operations ─────────────────────────────────────

    def save(self, user: User) -> User | None:
        for other in self.store.values():
            if other.email == user.email and other.id != user.id:
                raise ConflictError(f"Email {user.email} is already registered")

        kept_ids = set()
        for phone in user.phones:
            if phone.id is None:
                phone.id = next(self._phone_ids)
            phone.user_id = user.id
            kept_ids.add(phone.id)
            self.phones[phone.id] = copy.deepcopy(phone)

        for phone_id, phone in list(self.phones.items()):
            if phone.user_id == user.id and phone_id not in kept_ids:
                del self.phones[phone_id]

        stored = copy.deepcopy(user)
        stored.phones = []
        self.store[user.id] = stored
        return self.get_by_id(user.id)

    def update_login(self, user_id: str, token: str, at: datetime) -> bool:
        user = self.store.get(user_id)
        if not user:
            return False

        user.token = token
        user.last_login_at = at
        user.modified_at = at
        return True

    def delete(self, user_id: str) -> bool:
        if user_id not in self.store:
            return False

        for phone_id, phone in list(self.phones.items()):
            if phone.user_id == user_id:
                del self.phones[phone_id]
        del self.store[user_id]
        return True

    # ── read operations ──────────────────────────────────────

    def _with_phones(self, user: User) -> User:
        result = copy.deepcopy(user)
        result.phones = [
            copy.deepcopy(phone)
            for phone_id, phone in sorted(self.phones.items())
            if phone.user_id == user.id
        ]
        return result

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return self._with_phones(user) if user else None

    def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return self._with_phones(user)
        return None

    def find_all(self) -> list[User]:
        return [self._with_phones(user) for user in self.store.values()]

    def exists(self, user_id: str) -> bool:
        return user_id in self.store

    def get_phone(self, phone_id: int) -> Phone | None:
        phone = self.phones.get(phone_id)
        return copy.deepcopy(phone) if phone else None
