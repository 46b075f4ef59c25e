"""Authentication routes (login, registration)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from api.dependencies import get_token_provider, get_user_repo
from api.models import ErrorMessage, LoginRequest, RegisterRequest, TokenResponse, ValidationErrorResponse
from domain.model.errors import AuthError, ConflictError, DomainError, ValidationError
from port.token_provider import TokenProvider
from port.user_repository import UserRepository
from services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={400: {"model": ValidationErrorResponse}, 401: {"model": ErrorMessage}},
)
def login(
    request: LoginRequest,
    repo: UserRepository = Depends(get_user_repo),
    tokens: TokenProvider = Depends(get_token_provider),
):
    """Authenticate with email and password and return a bearer token.

    Raises:
        400 if email or password is missing or malformed, 401 on bad credentials
    """
    try:
        token = auth_service.login(repo, tokens, request.email, request.password)
    except ValidationError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ValidationErrorResponse(errors=e.errors).model_dump(),
        )
    except AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    except DomainError as e:
        logger.error("Login failed", extra={"error": str(e)})
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return TokenResponse(token=token)


@router.post(
    "/registro",
    response_model=TokenResponse,
    responses={400: {"model": ValidationErrorResponse}, 409: {"model": ErrorMessage}},
)
def register(
    request: RegisterRequest,
    repo: UserRepository = Depends(get_user_repo),
    tokens: TokenProvider = Depends(get_token_provider),
):
    """Register a new user and return a bearer token.

    Raises:
        400 if name, email or password is invalid, 409 if the email is taken
    """
    try:
        token = auth_service.register(repo, tokens, request.name, request.email, request.password)
    except ValidationError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ValidationErrorResponse(errors=e.errors).model_dump(),
        )
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except DomainError as e:
        logger.error("Registration failed", extra={"error": str(e)})
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return TokenResponse(token=token)
