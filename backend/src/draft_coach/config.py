"""Application configuration via pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_cache_path() -> str:
    """Per-user build cache file (~/.draftcoach/build-cache.json)."""
    return str(Path.home() / ".draftcoach" / "build-cache.json")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Settings
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 3210

    # CORS - comma-separated origins (env var: CORS_ORIGINS)
    cors_origins: str = "http://localhost:9000,http://127.0.0.1:9000"

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # LLM Provider (Gemini with Google Search grounding)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-pro"
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout: float = 120.0
    use_mock_llm: bool = False

    # Generation retry policy
    generation_max_attempts: int = 3
    generation_backoff_base_ms: int = 1000
    default_patch: str = "26.4"

    # Build cache (single JSON file)
    cache_path: str = _default_cache_path()
    cache_ttl_hours: float = 24.0

    # Name resolver policy (tunable; see utils/name_resolver.py)
    resolver_min_query_length: int = 2
    resolver_accept_threshold: float = 0.4
    resolver_contained_key_penalty: float = 0.8
    resolver_min_contained_key_length: int = 4

    # Item id canonicalization policy (see utils/item_ids.py)
    item_id_trigger_length: int = 6
    item_id_base_ceiling: int = 7000
    item_id_base_digits: int = 4
    item_id_fallback_digits: int = 5

    # Data Dragon metadata service
    ddragon_url: str = "https://ddragon.leagueoflegends.com"
    ddragon_version_ttl_seconds: float = 60 * 60
    ddragon_timeout: float = 10.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
