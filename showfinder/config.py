"""Configuration management for Showfinder."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Local favorites database used when DATABASE_URL is empty
DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "favorites.db"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Event provider
    ticketmaster_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("TICKETMASTER_API_KEY", "TM_API_KEY"),
        description="Ticketmaster Discovery API key",
    )

    # Spotify client-credentials flow
    spotify_client_id: str = Field(default="", description="Spotify client ID")
    spotify_client_secret: str = Field(default="", description="Spotify client secret")

    # Favorites store
    database_url: str = Field(
        default="",
        description="Favorites database: SQLite path, or libsql:// URL for Turso",
    )
    turso_auth_token: str = Field(default="", description="Turso authentication token")

    # Location lookup (client side)
    google_geocoding_api_key: str = Field(default="", description="Google Geocoding API key")
    ipinfo_token: str = Field(default="", description="IPinfo access token")
    api_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of a running Showfinder API (used by the client package)",
    )

    # Server config
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=3000, description="Listen port")
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Comma-separated CORS origins",
    )
    http_timeout: float = Field(default=30.0, description="Outbound HTTP timeout in seconds")
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def _strip_quotes(cls, value: Any) -> Any:
        """Strip surrounding quotes pasted into .env values."""
        if isinstance(value, str):
            value = value.strip()
            if value[:1] in ("'", '"'):
                value = value[1:]
            if value[-1:] in ("'", '"'):
                value = value[:-1]
            return value.strip()
        return value

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin]

    @property
    def has_ticketmaster(self) -> bool:
        """Check if the event provider key is configured."""
        return bool(self.ticketmaster_api_key)

    @property
    def has_spotify(self) -> bool:
        """Check if Spotify credentials are configured."""
        return bool(self.spotify_client_id and self.spotify_client_secret)

    @property
    def favorites_db(self) -> str:
        """Resolve the favorites database location."""
        return self.database_url or str(DEFAULT_DB_PATH)

    def missing_credentials(self) -> list[str]:
        """Names of credentials that are not configured."""
        missing = []
        if not self.has_ticketmaster:
            missing.append("TICKETMASTER_API_KEY")
        if not self.has_spotify:
            missing.append("SPOTIFY_CLIENT_ID/SPOTIFY_CLIENT_SECRET")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure application logging."""
    if settings is None:
        settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Suppress verbose third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
