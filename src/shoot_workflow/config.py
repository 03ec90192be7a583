"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from shoot_workflow.domain.auth import Role

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str
    supabase_url: str
    supabase_service_key: str
    shoot_cache_ttl_seconds: int = 60
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_role(raw: str | None) -> Role | None:
    """Parse a role string from a header or env value."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    for role in Role:
        if role.value.lower() == cleaned.lower():
            return role
    return None
