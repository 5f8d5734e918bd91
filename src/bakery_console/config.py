"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    strapi_api_url: str = "http://localhost:1337"
    strapi_api_token: str | None = None
    request_timeout_seconds: float = 15
    query_stale_seconds: int = 60
    default_page_size: int = 25
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def api_base_url(strapi_url: str) -> str:
    """Return the REST base path for a Strapi host."""
    cleaned = strapi_url.strip().rstrip("/")
    if cleaned.endswith("/api"):
        return cleaned
    return f"{cleaned}/api"
