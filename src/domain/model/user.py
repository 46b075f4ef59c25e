"""User domain models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from domain.model.errors import ConflictError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Phone:
    """A phone number owned by exactly one user."""
    number: str | None = None
    city_code: str | None = None
    country_code: str | None = None
    user_id: str | None = None
    id: int | None = None

    def check_owner(self, user_id: str) -> None:
        """Raise ConflictError if this phone belongs to another user."""
        if self.user_id != user_id:
            raise ConflictError(f"Phone {self.id} does not belong to user {user_id}")


@dataclass
class User:
    """Domain model representing a user and the phones it owns."""
    id: str
    name: str | None
    email: str | None
    password_hash: str | None = None
    active: bool = True
    created_at: datetime | None = None
    modified_at: datetime | None = None
    last_login_at: datetime | None = None
    token: str | None = None
    phones: list[Phone] = field(default_factory=list)

    @staticmethod
    def create(
        name: str | None,
        email: str | None,
        password_hash: str | None,
        active: bool = True,
        token: str | None = None,
        phones: list[Phone] | None = None,
    ) -> 'User':
        """Build a brand-new user. created_at, modified_at and last_login_at share one instant."""
        user_id = str(uuid.uuid4())
        now = utc_now()
        user = User(
            id=user_id,
            name=name,
            email=email,
            password_hash=password_hash,
            active=active,
            created_at=now,
            modified_at=now,
            last_login_at=now,
            token=token,
        )
        user.attach_phones(phones or [])
        return user

    def attach_phones(self, phones: list[Phone]) -> None:
        """Replace the phone list, pointing every phone back at this user."""
        for phone in phones:
            phone.user_id = self.id
        self.phones = list(phones)

    def find_phone(self, phone_id: int) -> Phone | None:
        for phone in self.phones:
            if phone.id == phone_id:
                return phone
        return None


@dataclass
class PhoneDto:
    """Client-facing phone shape."""
    id: int | None = None
    number: str | None = None
    city_code: str | None = None
    country_code: str | None = None


@dataclass
class UserDto:
    """Client-facing user shape.

    Every field is optional: ``None`` means "not supplied". ``password`` is only
    ever read from callers and is never filled in on the way out.
    """
    id: str | None = None
    name: str | None = None
    email: str | None = None
    password: str | None = None
    active: bool | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None
    last_login_at: datetime | None = None
    token: str | None = None
    phones: list[PhoneDto] | None = None
