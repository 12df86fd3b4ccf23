from __future__ import annotations
import os
from pydantic import BaseModel, Field

# width of rounds.trick_name; the configurable limit may only lower it
TRICK_NAME_COLUMN_LEN = 100

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "skatehubba-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "SkateHubba")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/skatehubba_dev")

    # Auth
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    access_ttl_min: int = int(os.getenv("ACCESS_TTL_MIN", "15"))
    refresh_ttl_min: int = int(os.getenv("REFRESH_TTL_MIN", "10080"))  # 7d
    reviewer_roles: list[str] = os.getenv("REVIEWER_ROLES", "mod,admin").split(",")

    # Links embedded in outbound mail
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "https://skatehubba.com")

    trick_name_max_len: int = Field(
        default=int(os.getenv("TRICK_NAME_MAX_LEN", str(TRICK_NAME_COLUMN_LEN))),
        ge=1, le=TRICK_NAME_COLUMN_LEN, validate_default=True,
    )

settings = Settings()
