from datetime import datetime
from typing import Protocol

from domain.model.user import Phone, User


class UserRepository(Protocol):
    """Protocol defining the interface for user and phone data access.

    A user and its phones are stored as one aggregate: ``save`` writes both,
    ``delete`` removes both.
    """
    def save(self, user: User) -> User | None:
        """Insert or replace a user together with its phone set.

        Phones without an id get a fresh sequential id; stored phones of this
        user missing from ``user.phones`` are removed.
        Raise ConflictError if the email is already used by another user.
        Return the stored User or None if the write failed.
        """
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def find_all(self) -> list[User]:
        ...

    def exists(self, user_id: str) -> bool:
        ...

    def delete(self, user_id: str) -> bool:
        """Delete a user and every phone it owns. Return True if a user was removed."""
        ...

    def get_phone(self, phone_id: int) -> Phone | None:
        """Find a phone by ID. Return Phone or None if not found."""
        ...

    def update_login(self, user_id: str, token: str, at: datetime) -> bool:
        """Store the latest token and login timestamp for a user. Return True if successful."""
        ...
