"""User CRUD routes.

Endpoints:
- GET /users: List all users (404 when there are none)
- GET /users/{user_id}: Get one user
- POST /users: Create a user
- PUT /users/{user_id}: Replace a user
- PATCH /users/{user_id}: Update the supplied fields of a user
- DELETE /users/{user_id}: Delete a user and its phones
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from api.dependencies import get_token_provider, get_user_repo
from api.models import ErrorMessage, PhoneResponse, UserRequest, UserResponse, ValidationErrorResponse
from api.security import get_current_user_required, get_user_creation_auth
from domain.model.errors import ConflictError, DomainError, NotFoundError, ValidationError
from domain.model.user import PhoneDto, User, UserDto
from port.token_provider import TokenProvider
from port.user_repository import UserRepository
from services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _to_user_dto(request: UserRequest) -> UserDto:
    phones = None
    if request.phones is not None:
        phones = [
            PhoneDto(
                id=p.id,
                number=p.number,
                city_code=p.city_code,
                country_code=p.country_code,
            )
            for p in request.phones
        ]
    return UserDto(
        name=request.name,
        email=request.email,
        password=request.password,
        active=request.active,
        phones=phones,
    )


def _to_response(dto: UserDto) -> UserResponse:
    return UserResponse(
        id=dto.id,
        name=dto.name,
        email=dto.email,
        active=dto.active,
        created_at=dto.created_at,
        modified_at=dto.modified_at,
        last_login_at=dto.last_login_at,
        token=dto.token,
        phones=[PhoneResponse(**vars(p)) for p in dto.phones or []],
    )


def _not_found(user_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User with ID {user_id} not found")


def _validation_failed(e: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationErrorResponse(errors=e.errors).model_dump(),
    )


def _http_error(e: DomainError) -> HTTPException:
    """Map a non-validation domain error to the HTTPException the route raises."""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.error("User operation failed", extra={"error": str(e)})
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


READ_RESPONSES = {
    401: {"model": ErrorMessage},
    404: {"model": ErrorMessage},
}
WRITE_RESPONSES = {
    400: {"model": ValidationErrorResponse},
    401: {"model": ErrorMessage},
    404: {"model": ErrorMessage},
    409: {"model": ErrorMessage},
}


@router.get("", response_model=list[UserResponse], responses=READ_RESPONSES)
def list_users(
    current_user: User = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    users = user_service.list_users(repo)
    if not users:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No registered users found")
    return [_to_response(user_service.to_dto(u)) for u in users]


@router.get("/{user_id}", response_model=UserResponse, responses=READ_RESPONSES)
def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    user = user_service.get(repo, user_id)
    if not user:
        raise _not_found(user_id)
    return _to_response(user_service.to_dto(user))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED, responses=WRITE_RESPONSES)
def create_user(
    request: UserRequest,
    current_user: Optional[User] = Depends(get_user_creation_auth),
    repo: UserRepository = Depends(get_user_repo),
    tokens: TokenProvider = Depends(get_token_provider),
):
    """Create a user. Responds with the stored user and its first token."""
    try:
        dto = user_service.create_with_validation(repo, tokens, _to_user_dto(request))
    except ValidationError as e:
        return _validation_failed(e)
    except DomainError as e:
        raise _http_error(e)
    return _to_response(dto)


@router.put("/{user_id}", response_model=UserResponse, responses=WRITE_RESPONSES)
def update_user(
    user_id: str,
    request: UserRequest,
    current_user: User = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    """Replace a user. Phones missing from the request are removed."""
    if not user_service.exists(repo, user_id):
        raise _not_found(user_id)
    try:
        dto = user_service.update_with_validation(repo, user_id, _to_user_dto(request))
    except ValidationError as e:
        return _validation_failed(e)
    except DomainError as e:
        raise _http_error(e)
    return _to_response(dto)


@router.patch("/{user_id}", response_model=UserResponse, responses=WRITE_RESPONSES)
def partial_update_user(
    user_id: str,
    request: UserRequest,
    current_user: User = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    """Update only the fields present in the request."""
    if not user_service.exists(repo, user_id):
        raise _not_found(user_id)
    try:
        dto = user_service.partial_update_with_validation(repo, user_id, _to_user_dto(request))
    except ValidationError as e:
        return _validation_failed(e)
    except DomainError as e:
        raise _http_error(e)
    return _to_response(dto)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, responses=READ_RESPONSES)
def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    if not user_service.exists(repo, user_id):
        raise _not_found(user_id)
    user_service.delete(repo, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
