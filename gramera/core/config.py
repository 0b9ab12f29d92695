"""
Application configuration using pydantic-settings.

All environment variables are defined here with type safety.
"""

from typing import Literal

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Redis
    REDIS_URL: RedisDsn = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for rate-limit counters",
    )

    # CORS
    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # AI suggestion service (OpenAI-compatible chat completions API)
    AI_API_URL: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="Chat completions endpoint used for image suggestions",
    )
    AI_API_KEY: str = Field(
        default="",
        description="API key for the suggestion service; empty disables the call",
    )
    AI_MODEL: str = "gpt-4o"
    AI_TIMEOUT_SECONDS: float = 30.0

    # Rate Limiting
    AI_RATE_LIMIT_PER_MINUTE: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
