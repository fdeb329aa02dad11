"""Application configuration."""

import os
from typing import Any, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden with environment variables.
    """

    # API
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Yolcu Chat"

    # Critical settings (must be provided)
    APP_DATABASE_URL: str = ""
    AUTH_JWT_SECRET: str = ""

    # Identity tokens issued by the auth provider
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: str = "authenticated"

    # Database pool
    POOL_SIZE: int = 10
    MAX_OVERFLOW: int = 20
    POOL_RECYCLE: int = 3600
    POOL_TIMEOUT: int = 30
    POOL_PRE_PING: bool = True
    SQL_ECHO: bool = False

    # Redis / rate limiting
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    JOIN_RATE_LIMIT_PER_MINUTE: int = 10
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # RabbitMQ
    RABBITMQ_HOST: str = "localhost"
    RABBITMQ_PORT: int = 5672
    RABBITMQ_USER: str = "guest"
    RABBITMQ_PASSWORD: str = "guest"
    RABBITMQ_VHOST: str = "/"

    # Push notifications
    EXPO_PUSH_URL: str = "https://exp.host/--/api/v2/push/send"
    EXPO_ACCESS_TOKEN: Optional[str] = None
    PUSH_CHUNK_SIZE: int = 100
    PUSH_TIMEOUT_SECONDS: float = 10.0

    # Video calls
    LIVEKIT_API_KEY: Optional[str] = None
    LIVEKIT_API_SECRET: Optional[str] = None
    LIVEKIT_URL: Optional[str] = None
    CALL_TOKEN_TTL_SECONDS: int = 7200

    # Invite codes
    INVITE_CODE_LENGTH: int = 8
    INVITE_CODE_MAX_ATTEMPTS: int = 5

    # Realtime gateway
    WS_HOST: str = "0.0.0.0"
    WS_PORT: int = 8001

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra environment variables
    )

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)

        # Validate critical settings
        critical_settings = [
            ("APP_DATABASE_URL", self.APP_DATABASE_URL),
            ("AUTH_JWT_SECRET", self.AUTH_JWT_SECRET),
        ]

        missing_settings = [name for name, value in critical_settings if not value]
        if missing_settings:
            raise ValueError(
                f"Critical settings missing: {', '.join(missing_settings)}"
            )

    @property
    def livekit_configured(self) -> bool:
        """Whether all call-session credentials are present."""
        return bool(
            self.LIVEKIT_API_KEY and self.LIVEKIT_API_SECRET and self.LIVEKIT_URL
        )


# Create global settings instance
settings = Settings()

if os.getenv("ENVIRONMENT") == "production":
    assert (
        len(settings.AUTH_JWT_SECRET) >= 32
    ), "AUTH_JWT_SECRET is too short for production"
