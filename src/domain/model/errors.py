"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Route handlers catch them and map to appropriate HTTP status codes.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class ConflictError(DomainError):
    """Uniqueness or ownership rule violated (e.g. email taken, foreign phone)."""


class AuthError(DomainError):
    """Bad credentials or an unusable bearer token."""


class TokenError(AuthError):
    """Token is empty, malformed, unsupported or carries an invalid signature."""


class ValidationError(DomainError):
    """Input violates one or more validation rules.

    ``errors`` keeps every failing rule's message in the order checked;
    ``str(error)`` is the first of them.
    """

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(self.errors[0] if self.errors else "Invalid input")
