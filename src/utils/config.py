"""Process-wide settings read from the environment (and ``.env``)."""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    mongo_url: str | None = None
    mongodb_database: str = "user_directory"
    # Empty secret means a random key per process; tokens then die with it.
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS512"
    # Kept for parity with deployments that set it; tokens carry no exp claim.
    jwt_expiration_ms: int = 86400000
    bcrypt_rounds: int = 10
    public_user_creation: bool = True
    seed_demo_data: bool = False
    cors_origins: str = "*"
    log_level: str = "INFO"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mongo_url=os.getenv("MONGO_URL") or None,
            mongodb_database=os.getenv("MONGODB_DATABASE", cls.mongodb_database),
            jwt_secret=os.getenv("JWT_SECRET") or None,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", cls.jwt_algorithm),
            jwt_expiration_ms=int(os.getenv("JWT_EXPIRATION_MS", cls.jwt_expiration_ms)),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", cls.bcrypt_rounds)),
            public_user_creation=_env_bool("PUBLIC_USER_CREATION", cls.public_user_creation),
            seed_demo_data=_env_bool("SEED_DEMO_DATA", cls.seed_demo_data),
            cors_origins=os.getenv("CORS_ORIGINS", cls.cors_origins),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            port=int(os.getenv("PORT", cls.port)),
        )


@lru_cache
def get_settings() -> Settings:
    """Load ``.env`` once and build the settings."""
    load_dotenv()
    return Settings.from_env()
