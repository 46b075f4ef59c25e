"""FastAPI application entry point."""

import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models import ValidationErrorResponse
from api.routes import auth, health, users
from utils.config import get_settings
from utils.logging import setup_structured_logging
from adapter.mongodb.connection import get_mongodb_client, DATABASE_NAME
from adapter.mongodb.indexes import ensure_all_indexes

SERVICE_NAME = "User Directory API"

settings = get_settings()
setup_structured_logging(level=settings.log_level, service=SERVICE_NAME)

logger = logging.getLogger(__name__)

# pyproject.toml is the single source of truth for the version
_project_root = Path(__file__).parent.parent.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    client = get_mongodb_client()
    if client:
        db = client[DATABASE_NAME]
        if ensure_all_indexes(db):
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")

        if settings.seed_demo_data:
            from adapter.mongodb.user_repository import MongoUserRepository
            from services.seed_service import seed_demo_users
            seed_demo_users(MongoUserRepository(db))
    else:
        logger.warning("MongoDB unavailable, skipping index creation")

    yield


app = FastAPI(
    title=SERVICE_NAME,
    description="User management API with JWT login and registration",
    version=VERSION,
    lifespan=lifespan,
)

# Browsers reject credentials together with a wildcard origin
if settings.cors_origins == "*":
    cors_origins = ["*"]
    allow_credentials = False
    logger.warning("CORS configured with wildcard origin ('*'). Set CORS_ORIGINS for production.")
else:
    cors_origins = [origin.strip() for origin in settings.cors_origins.split(",")]
    allow_credentials = True
    logger.info(f"CORS configured with specific origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _describe(error: dict) -> str:
    message = error.get("msg", "Invalid request body")
    if error.get("type") == "json_invalid":
        return message
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field}: {message}" if field else message


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Unreadable or wrongly typed bodies get the same 400 shape as rule violations."""
    errors = [_describe(error) for error in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationErrorResponse(errors=errors).model_dump(),
    )


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.port,
        access_log=False
    )
