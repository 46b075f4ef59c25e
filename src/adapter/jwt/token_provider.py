"""JWT implementation of TokenProvider (python-jose, HMAC-SHA-512)."""

import logging
import secrets
from datetime import datetime, timezone

from jose import JWTError, jwt

from domain.model.errors import TokenError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS512"


class JoseTokenProvider:
    """Signs tokens with a symmetric key handed in at construction.

    Tokens carry ``sub`` (the user's email) and ``iat`` only.
    """

    def __init__(self, secret: str, algorithm: str = JWT_ALGORITHM):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm

    @classmethod
    def from_secret(cls, secret: str | None, algorithm: str = JWT_ALGORITHM) -> "JoseTokenProvider":
        """Build a provider, generating a random process-local key when no secret is configured."""
        if not secret:
            logger.warning(
                "JWT_SECRET not set; using a random signing key. "
                "Issued tokens will stop verifying after a restart."
            )
            secret = secrets.token_urlsafe(64)
        return cls(secret, algorithm)

    def issue(self, subject: str) -> str:
        payload = {
            "sub": subject,
            "iat": datetime.now(timezone.utc),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def subject_of(self, token: str) -> str:
        if not token or not token.strip():
            raise TokenError("Token is empty")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug(f"JWT verification failed: {e}")
            raise TokenError("Invalid token") from e

        subject = payload.get("sub")
        if not subject:
            raise TokenError("Token has no subject")
        return subject

    def verify(self, token: str) -> bool:
        try:
            self.subject_of(token)
            return True
        except TokenError:
            return False
