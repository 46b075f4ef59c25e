from functools import lru_cache

from fastapi import HTTPException

from adapter.jwt.token_provider import JoseTokenProvider
from adapter.mongodb.connection import get_mongodb_client, DATABASE_NAME
from adapter.mongodb.user_repository import MongoUserRepository
from port.token_provider import TokenProvider
from port.user_repository import UserRepository
from utils.config import get_settings


def _get_db():
    """Get MongoDB database, raising 503 if unavailable."""
    client = get_mongodb_client()
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return client[DATABASE_NAME]


def get_user_repo() -> UserRepository:
    return MongoUserRepository(_get_db())


@lru_cache
def get_token_provider() -> TokenProvider:
    """One signing key for the whole process."""
    settings = get_settings()
    return JoseTokenProvider.from_secret(settings.jwt_secret, settings.jwt_algorithm)
