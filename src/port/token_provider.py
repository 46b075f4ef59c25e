from typing import Protocol


class TokenProvider(Protocol):
    """Issues and checks signed bearer tokens whose subject is a user email."""

    def issue(self, subject: str) -> str:
        """Return a signed token carrying ``subject`` and the issue time."""
        ...

    def subject_of(self, token: str) -> str:
        """Return the token subject. Raise TokenError if the token is unusable."""
        ...

    def verify(self, token: str) -> bool:
        """Return True if signature and structure are valid. Never raises."""
        ...
