"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - page_limit is positive; default_order_direction is +1 or -1

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for every setting: works out-of-the-box against the sample foods API
      (resource_path and items_field must agree: /foods answers {"foods": [...], "paging": {...}})
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Data source
    api_base_url: str = "https://learn.codeit.kr/api"
    resource_path: str = "/foods"
    items_field: str = "foods"
    id_field: str = "id"
    request_timeout_seconds: float = 10.0

    @field_validator("api_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are joined as base + resource_path, which starts with '/'."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    # Pagination
    page_limit: int = 10
    default_order_key: str = "createdAt"
    default_order_direction: int = -1

    @field_validator("page_limit")
    @classmethod
    def positive_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("page_limit must be a positive integer")
        return v

    @field_validator("default_order_direction")
    @classmethod
    def signed_direction(cls, v: int) -> int:
        if v not in (1, -1):
            raise ValueError("default_order_direction must be 1 or -1")
        return v

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
