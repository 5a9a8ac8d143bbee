"""
Configuration management for geofence-kit.

Provides type-safe settings using Pydantic BaseSettings with
environment variable support and .env file loading.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """geofence-kit settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level used when LOG_LEVEL is not set (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # HTTP client configuration
    http_timeout: Optional[float] = Field(
        default=None,
        description="HTTP request timeout in seconds (None waits for the response)",
    )

    # Routing service (OSRM) configuration
    routing_url_markers: list[str] = Field(
        default=["mapbox-osrm", "route"],
        description="Substrings a routing service URL must contain",
    )
    routing_profiles: list[str] = Field(
        default=["van", "car", "bike", "foot"],
        description="OSRM profile names that precede the coordinate path segment",
    )
    routing_max_attempts: int = Field(
        default=1,
        description="Attempts for a routing request (1 disables retry)",
    )

    # Polyline codec
    polyline_precision: int = Field(
        default=6,
        description="Default decimal precision for encoded polylines",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
