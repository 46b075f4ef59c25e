"""Validation, uniqueness checks and merge rules for users.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.

Every check of an operation runs before its single ``repo.save`` call, so a
rejected request never leaves part of its changes behind.
"""

import logging
import uuid

from domain.model.errors import ConflictError, DomainError, NotFoundError, ValidationError
from domain.model.user import Phone, PhoneDto, User, UserDto, utc_now
from domain.model.validation import (
    EMAIL_ERROR_MESSAGE,
    PASSWORD_ERROR_MESSAGE,
    is_blank,
    is_valid_email,
    is_valid_password,
)
from port.token_provider import TokenProvider
from port.user_repository import UserRepository
from services.password import hash_password

logger = logging.getLogger(__name__)


# ── conversion ───────────────────────────────────────────────

def _phone_to_dto(phone: Phone) -> PhoneDto:
    return PhoneDto(
        id=phone.id,
        number=phone.number,
        city_code=phone.city_code,
        country_code=phone.country_code,
    )


def to_dto(user: User) -> UserDto:
    """Convert a User to its client-facing shape. The password hash never leaves."""
    return UserDto(
        id=user.id,
        name=user.name,
        email=user.email,
        active=user.active,
        created_at=user.created_at,
        modified_at=user.modified_at,
        last_login_at=user.last_login_at,
        token=user.token,
        phones=[_phone_to_dto(p) for p in user.phones],
    )


def from_dto(dto: UserDto) -> User:
    """Copy the supplied fields of ``dto`` onto a fresh User.

    A non-empty password is hashed; an empty one is ignored.
    """
    user = User(id=dto.id or str(uuid.uuid4()), name=dto.name, email=dto.email)
    if dto.password:
        user.password_hash = hash_password(dto.password)
    if dto.active is not None:
        user.active = dto.active
    if dto.created_at is not None:
        user.created_at = dto.created_at
    if dto.modified_at is not None:
        user.modified_at = dto.modified_at
    if dto.last_login_at is not None:
        user.last_login_at = dto.last_login_at
    if dto.token is not None:
        user.token = dto.token
    if dto.phones is not None:
        user.attach_phones([
            Phone(
                id=p.id,
                number=p.number,
                city_code=p.city_code,
                country_code=p.country_code,
            )
            for p in dto.phones
        ])
    return user


# ── queries ──────────────────────────────────────────────────

def get(repo: UserRepository, user_id: str) -> User | None:
    return repo.get_by_id(user_id)


def get_by_email(repo: UserRepository, email: str) -> User | None:
    return repo.get_by_email(email)


def list_users(repo: UserRepository) -> list[User]:
    return repo.find_all()


def exists(repo: UserRepository, user_id: str) -> bool:
    return repo.exists(user_id)


def get_phone(repo: UserRepository, phone_id: int) -> Phone | None:
    return repo.get_phone(phone_id)


def is_email_available(repo: UserRepository, email: str, exclude_id: str | None = None) -> bool:
    """True if nobody uses ``email``, or only the user ``exclude_id`` does."""
    existing = repo.get_by_email(email)
    return existing is None or (exclude_id is not None and existing.id == exclude_id)


# ── validation ───────────────────────────────────────────────

def validate_user_data(dto: UserDto) -> list[str]:
    """Check the format of whichever of email and password are supplied.

    Returns every failing rule's message; an empty list means valid.
    """
    errors = []
    if dto.email is not None and not is_valid_email(dto.email):
        errors.append(EMAIL_ERROR_MESSAGE)
    if dto.password and not is_valid_password(dto.password):
        errors.append(PASSWORD_ERROR_MESSAGE)
    return errors


def _require(errors: list[str], missing: bool, message: str) -> None:
    if missing and message not in errors:
        errors.append(message)


# ── phone merge ──────────────────────────────────────────────

def _owned_phone(repo: UserRepository, user: User, phone_id: int) -> Phone:
    """Return the user's phone ``phone_id``; NotFoundError / ConflictError otherwise."""
    stored = repo.get_phone(phone_id)
    if stored is None:
        raise NotFoundError(f"Phone {phone_id} not found")
    stored.check_owner(user.id)
    return user.find_phone(phone_id) or stored


def _merge_phones(repo: UserRepository, user: User, phone_dtos: list[PhoneDto], replace: bool) -> list[Phone]:
    """Merge ``phone_dtos`` into the user's phones.

    With ``replace`` the result holds only the phones mentioned, each fully
    overwritten. Without it, phones with an id only take the supplied fields
    and unmentioned phones stay.
    """
    merged: list[Phone] = [] if replace else list(user.phones)
    for phone_dto in phone_dtos:
        if phone_dto.id is None:
            merged.append(Phone(
                number=phone_dto.number,
                city_code=phone_dto.city_code,
                country_code=phone_dto.country_code,
                user_id=user.id,
            ))
            continue

        phone = _owned_phone(repo, user, phone_dto.id)
        if replace:
            phone.number = phone_dto.number
            phone.city_code = phone_dto.city_code
            phone.country_code = phone_dto.country_code
        else:
            if phone_dto.number is not None:
                phone.number = phone_dto.number
            if phone_dto.city_code is not None:
                phone.city_code = phone_dto.city_code
            if phone_dto.country_code is not None:
                phone.country_code = phone_dto.country_code

        if all(p.id != phone.id for p in merged):
            merged.append(phone)
    return merged


def _save(repo: UserRepository, user: User) -> User:
    saved = repo.save(user)
    if not saved:
        raise DomainError("Failed to save user")
    return saved


# ── commands ─────────────────────────────────────────────────

def create_with_validation(repo: UserRepository, tokens: TokenProvider, dto: UserDto) -> UserDto:
    """Create a user from client data.

    Returns the stored user as a DTO, including a freshly minted token.

    Raises:
        ValidationError: email or password missing or malformed (all messages)
        ConflictError: email already registered
    """
    errors = validate_user_data(dto)
    _require(errors, is_blank(dto.email), EMAIL_ERROR_MESSAGE)
    _require(errors, is_blank(dto.password), PASSWORD_ERROR_MESSAGE)
    if errors:
        raise ValidationError(errors)

    if not is_email_available(repo, dto.email):
        raise ConflictError(f"Email {dto.email} is already registered")

    user = from_dto(dto)
    now = utc_now()
    user.id = str(uuid.uuid4())
    user.active = True
    user.created_at = now
    user.modified_at = now
    user.last_login_at = now
    user.token = tokens.issue(user.email)
    for phone in user.phones:
        phone.id = None
    user.attach_phones(user.phones)

    saved = _save(repo, user)
    logger.info("User created", extra={"userId": saved.id, "phoneCount": len(saved.phones)})
    return to_dto(saved)


def update_with_validation(repo: UserRepository, user_id: str, dto: UserDto) -> UserDto:
    """Replace every mutable field of a user.

    ``id``, ``created_at``, ``last_login_at`` and ``token`` are kept. A missing
    ``active`` resets to True and a missing phone list removes all phones.
    The password hash changes only when a non-empty password is supplied.

    Raises:
        NotFoundError: unknown user, or a phone id that does not exist
        ValidationError: email missing or malformed, password malformed
        ConflictError: email taken by another user, or phone owned by another user
    """
    user = repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")

    errors = validate_user_data(dto)
    _require(errors, is_blank(dto.email), EMAIL_ERROR_MESSAGE)
    if errors:
        raise ValidationError(errors)

    if not is_email_available(repo, dto.email, exclude_id=user_id):
        raise ConflictError(f"Email {dto.email} is already registered to another user")

    phones = _merge_phones(repo, user, dto.phones or [], replace=True)

    user.name = dto.name
    user.email = dto.email
    user.active = dto.active if dto.active is not None else True
    if dto.password:
        user.password_hash = hash_password(dto.password)
    user.modified_at = utc_now()
    user.attach_phones(phones)

    saved = _save(repo, user)
    logger.info("User replaced", extra={"userId": user_id, "phoneCount": len(saved.phones)})
    return to_dto(saved)


def partial_update_with_validation(repo: UserRepository, user_id: str, dto: UserDto) -> UserDto:
    """Apply only the supplied fields of ``dto`` to a user.

    Raises:
        NotFoundError: unknown user, or a phone id that does not exist
        ValidationError: a supplied email or password is malformed
        ConflictError: email taken by another user, or phone owned by another user
    """
    user = repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")

    errors = validate_user_data(dto)
    if errors:
        raise ValidationError(errors)

    if dto.email is not None and not is_email_available(repo, dto.email, exclude_id=user_id):
        raise ConflictError(f"Email {dto.email} is already registered to another user")

    if dto.phones is not None:
        user.attach_phones(_merge_phones(repo, user, dto.phones, replace=False))

    if dto.name is not None:
        user.name = dto.name
    if dto.email is not None:
        user.email = dto.email
    if dto.active is not None:
        user.active = dto.active
    if dto.password:
        user.password_hash = hash_password(dto.password)
    user.modified_at = utc_now()

    saved = _save(repo, user)
    logger.info("User updated", extra={"userId": user_id})
    return to_dto(saved)


def delete(repo: UserRepository, user_id: str) -> bool:
    """Delete a user and all their phones. Return False if the user did not exist."""
    deleted = repo.delete(user_id)
    if deleted:
        logger.info("User deleted", extra={"userId": user_id})
    return deleted
