from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    postgres_host: str = "postgres"
    postgres_port: int = 5432
    postgres_db: str = "postgres"
    postgres_user: str = "postgres"
    postgres_password: str
    database_url: Optional[str] = None  # overrides the POSTGRES_* settings when set
    log_sql: bool = False

    # Connection pool
    db_pool_size: int = 20
    db_pool_recycle_seconds: int = 30
    db_pool_timeout_seconds: int = 30
    db_connect_timeout_seconds: int = 2

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    log_format: str = "json"
    static_dir: str = "site"
    allow_cors_origins: List[str] = []
    trust_proxy_headers: bool = False

    # Request admission
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: int = 15 * 60
    max_body_bytes: int = 10 * 1024

    @field_validator("postgres_password")
    @classmethod
    def validate_postgres_password(cls, v: str) -> str:
        """Refuse to start without a database password."""
        if not v:
            raise ValueError(
                "POSTGRES_PASSWORD must be set to a non-empty value."
            )
        return v

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
