"""Configuration settings using pydantic-settings."""
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field

from .endpoints import BASE_URL


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    # Edusign account
    EDUSIGN_API_KEY: Optional[str] = Field(
        default=None,
        description="Edusign account API key (Bearer token)"
    )
    EDUSIGN_BASE_URL: str = Field(
        default=BASE_URL,
        description="Edusign API base URL"
    )

    # Transport
    EDUSIGN_TIMEOUT: int = Field(default=30, description="API request timeout in seconds")

    # Error handling
    EDUSIGN_STRICT_ERRORS: bool = Field(
        default=True,
        description="Raise RemoteError on error envelopes (False: return them and log)"
    )

    # Group cache
    EDUSIGN_GROUP_CACHE_SIZE: int = Field(
        default=32,
        ge=0,
        description="Maximum cached groups per client (0 disables caching)"
    )

    class Config:
        """Pydantic config."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"
