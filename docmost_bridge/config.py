"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Credentials come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Components never read Settings themselves; main.py passes values into constructors

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Env names kept identical to the original shim (DOCMOST_*, RETRY_*, CACHE_*)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from docmost_bridge.core.domain_types import RetryPolicy


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Docmost
    docmost_base_url: str = "http://localhost:3000"
    docmost_email: str = ""
    docmost_password: str = ""

    @field_validator("docmost_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    request_timeout_seconds: float = 30.0
    session_ttl_seconds: float = 6 * 60 * 60
    login_debounce_seconds: float = 60.0

    # Retry (milliseconds, like the original shim)
    retry_max_attempts: int = 3
    retry_min_timeout: int = 1000
    retry_max_timeout: int = 30_000
    retry_factor: float = 2

    # Cache (seconds)
    cache_spaces_ttl: int = 300
    cache_search_ttl: int = 120
    cache_all_pages_ttl: int | None = None
    cache_max_entries: int = 100

    # API
    host: str = "127.0.0.1"
    port: int = 3888
    shim_api_key: str | None = None

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            min_delay_ms=self.retry_min_timeout,
            max_delay_ms=self.retry_max_timeout,
            factor=self.retry_factor,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
