"""Registration and login business logic.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.
"""

import logging

from domain.model.errors import AuthError, DomainError, ConflictError, ValidationError
from domain.model.user import User, utc_now
from domain.model.validation import (
    EMAIL_ERROR_MESSAGE,
    NAME_ERROR_MESSAGE,
    PASSWORD_ERROR_MESSAGE,
    is_blank,
    is_valid_email,
    is_valid_password,
)
from port.token_provider import TokenProvider
from port.user_repository import UserRepository
from services.password import hash_password, verify_password

logger = logging.getLogger(__name__)


def _validate_login(email: str | None, password: str | None) -> None:
    errors = []
    if is_blank(email) or not is_valid_email(email):
        errors.append(EMAIL_ERROR_MESSAGE)
    if is_blank(password):
        errors.append(PASSWORD_ERROR_MESSAGE)
    if errors:
        raise ValidationError(errors)


def _validate_registration(name: str | None, email: str | None, password: str | None) -> None:
    errors = []
    if is_blank(email) or not is_valid_email(email):
        errors.append(EMAIL_ERROR_MESSAGE)
    if is_blank(password) or not is_valid_password(password):
        errors.append(PASSWORD_ERROR_MESSAGE)
    if is_blank(name):
        errors.append(NAME_ERROR_MESSAGE)
    if errors:
        raise ValidationError(errors)


def login(repo: UserRepository, tokens: TokenProvider, email: str, password: str) -> str:
    """Check credentials and issue a new token.

    The token and the login time are stored on the user record.

    Raises:
        ValidationError: email blank or malformed, password blank
        AuthError: unknown email or wrong password (deliberately vague)
    """
    _validate_login(email, password)

    user = repo.get_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        logger.info("Login rejected")
        raise AuthError("Invalid email or password")

    token = tokens.issue(user.email)
    if not repo.update_login(user.id, token, utc_now()):
        raise DomainError("Failed to record login")

    logger.info("User logged in", extra={"userId": user.id})
    return token


def register(repo: UserRepository, tokens: TokenProvider, name: str, email: str, password: str) -> str:
    """Register a new active user and return its first token.

    Raises:
        ValidationError: email, password or name invalid (messages in that order)
        ConflictError: email already registered
    """
    _validate_registration(name, email, password)

    if repo.get_by_email(email):
        raise ConflictError(f"Email {email} is already registered")

    token = tokens.issue(email)
    user = User.create(
        name=name,
        email=email,
        password_hash=hash_password(password),
        active=True,
        token=token,
    )
    if not repo.save(user):
        raise DomainError("Failed to create user")

    logger.info("User registered", extra={"userId": user.id})
    return token
