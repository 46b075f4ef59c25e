"""Bearer-token security dependencies."""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from api.dependencies import get_token_provider, get_user_repo
from domain.model.errors import TokenError
from domain.model.user import User
from port.token_provider import TokenProvider
from port.user_repository import UserRepository
from utils.config import get_settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user_required(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repo: UserRepository = Depends(get_user_repo),
    tokens: TokenProvider = Depends(get_token_provider),
) -> User:
    """Resolve the bearer token to a stored user. Raises 401 if that fails."""
    if not credentials:
        raise _unauthorized("Not authenticated")

    try:
        email = tokens.subject_of(credentials.credentials)
    except TokenError as e:
        logger.debug(f"Bearer token rejected: {e}")
        raise _unauthorized("Invalid authentication credentials")

    user = repo.get_by_email(email)
    if not user:
        raise _unauthorized("User not found")
    return user


def get_user_creation_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repo: UserRepository = Depends(get_user_repo),
    tokens: TokenProvider = Depends(get_token_provider),
) -> Optional[User]:
    """POST /users is open unless PUBLIC_USER_CREATION is switched off."""
    if get_settings().public_user_creation:
        return None
    return get_current_user_required(credentials, repo, tokens)
