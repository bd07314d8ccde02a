"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box locally
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Anthropic transport
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 120
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 60_000

    # Oracles
    generation_model: str = "claude-sonnet-4-5"
    correction_model: str = "claude-haiku-4-5"
    verification_model: str = "claude-sonnet-4-5"
    oracle_max_tokens: int = 4096
    # Bounds each oracle call on top of the transport retries
    oracle_timeout_seconds: float = 180.0
    correction_language: str = "Turkish"

    # Submissions
    question_min_length: int = 3
    question_max_length: int = 4000
    file_max_bytes: int = 10 * 1024 * 1024
    # None = entries live for the process lifetime
    store_ttl_seconds: float | None = None

    @field_validator("store_ttl_seconds", mode="before")
    @classmethod
    def empty_ttl_is_none(cls, v):
        """Allow STORE_TTL_SECONDS= (empty) in .env to mean no expiry."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
