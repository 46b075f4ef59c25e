"""Email and password format rules."""

import re

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")

# At least 8 chars, one digit, one lowercase, one uppercase, one special, no whitespace.
PASSWORD_PATTERN = re.compile(r"^(?=.*[0-9])(?=.*[a-z])(?=.*[A-Z])(?=.*[@#$%^&+=!])(?=\S+$).{8,}$")

EMAIL_ERROR_MESSAGE = "Email must have a valid format (example: user@domain.com)"
PASSWORD_ERROR_MESSAGE = (
    "Password must be at least 8 characters long and contain an uppercase letter, "
    "a lowercase letter, a number and a special character (@#$%^&+=!)"
)
NAME_ERROR_MESSAGE = "Name is required"


def is_valid_email(email: str | None) -> bool:
    if not email:
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None


def is_valid_password(password: str | None) -> bool:
    if not password:
        return False
    return PASSWORD_PATTERN.fullmatch(password) is not None


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()
