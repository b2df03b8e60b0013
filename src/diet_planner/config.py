"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    generative_provider: str = "openai"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    generation_timeout_seconds: float = 60.0
    generation_soft_timeout_seconds: float = 25.0
    tracker_update_attempts: int = 3
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_provider(settings: Settings) -> str | None:
    """Return the configured generative provider, or None when it has no key."""
    provider = settings.generative_provider.strip().lower()
    if provider == "gemini":
        return "gemini" if settings.gemini_api_key else None
    if provider == "openai":
        return "openai" if settings.openai_api_key else None
    return None
