"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000"

    # ==========================================================================
    # Languages
    # ==========================================================================

    # Language the UI is authored in; translating into it is a no-op
    source_language: str = "en"
    default_language: str = "en"

    # ==========================================================================
    # Translation Service
    # ==========================================================================

    # Which backend to use: http, google, llm, static
    translation_backend: str = "http"

    # Backend behind our own /translate endpoints (must not be "http")
    api_translation_backend: str = "google"

    # Generic JSON endpoint ({texts, targetLanguage} -> {translations})
    translation_api_url: str = "http://localhost:8000/translate/batch"
    translation_api_token: str = ""

    # Google Translate v2
    google_translate_api_key: str = ""

    # LLM backend (accepts either GOOGLE_API_KEY or GEMINI_API_KEY for Gemini)
    llm_provider: str = "gemini"
    google_api_key: str = ""
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    openai_api_key: str = ""
    openai_model: str = "gpt-4-turbo"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-opus-20240229"

    # Seconds per attempt; a timeout counts as a failed attempt
    translation_timeout: float = 10.0
    translation_max_attempts: int = 3
    translation_batch_size: int = 100

    # ==========================================================================
    # Translation Cache
    # ==========================================================================

    # Snapshot file; empty keeps the cache in memory only
    translation_cache_file: str = ""
    translation_cache_expiry_days: int = 7

    # Remembers the user's language choice across restarts; empty disables
    language_preference_file: str = ""

    # Let t() schedule a background fetch on a cache miss
    background_fetch_on_miss: bool = False

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
