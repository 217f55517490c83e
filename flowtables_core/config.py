"""
Application Configuration

Settings for the API server, loaded from environment variables.
"""

import os
from typing import List, Optional

from pydantic import BaseModel

from .webhooks.dispatcher import JoinPolicy


class AppConfig(BaseModel):
    """Application configuration."""

    # API settings
    title: str = "Flow Tables API"
    description: str = "Tables, fields and records for workflow automation"
    version: str = "1.0.0"
    api_prefix: str = "/v1"

    # Server settings
    debug: bool = False
    docs_enabled: bool = True

    # Database
    database_url: str = "sqlite+aiosqlite:///./flowtables.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    create_tables: bool = False

    # Webhooks
    public_url: Optional[str] = None
    webhook_timeout_seconds: float = 30.0
    webhook_join_policy: JoinPolicy = JoinPolicy.WAIT_ALL

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "pretty"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load configuration from environment variables."""
        return cls(
            debug=os.getenv("DEBUG", "false").lower() == "true",
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./flowtables.db",
            ),
            database_pool_size=int(os.getenv("DATABASE_POOL_SIZE", "5")),
            database_max_overflow=int(os.getenv("DATABASE_MAX_OVERFLOW", "10")),
            create_tables=os.getenv("CREATE_TABLES", "false").lower() == "true",
            public_url=os.getenv("PUBLIC_URL") or None,
            webhook_timeout_seconds=float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "30")),
            webhook_join_policy=JoinPolicy(
                os.getenv("WEBHOOK_JOIN_POLICY", JoinPolicy.WAIT_ALL.value)
            ),
            cors_origins=os.getenv("CORS_ORIGINS", "http://localhost:3000").split(","),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv(
                "LOG_FORMAT",
                "json" if os.getenv("ENVIRONMENT") == "production" else "pretty",
            ),
        )


__all__ = ["AppConfig"]
