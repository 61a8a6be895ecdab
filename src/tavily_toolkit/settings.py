"""
Application Settings

Centralized configuration using Pydantic Settings. Values are read from
``TAVILY_*`` environment variables (or a ``.env`` file) and normalized
leniently: out-of-range numbers are clamped and unknown enum values fall back
to their defaults instead of failing validation.
"""

import math
from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.tavily.com"
DEFAULT_SEARCH_DEPTH = "advanced"
DEFAULT_MAX_RESULTS = 5
MAX_RESULTS_CAP = 20
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_CACHE_TTL_MINUTES = 15.0
DEFAULT_CACHE_MAX_ENTRIES = 100
DEFAULT_POLL_INTERVAL_SECONDS = 2.0
MIN_RESEARCH_WAIT_SECONDS = 10.0
MAX_RESEARCH_WAIT_SECONDS = 150.0

SEARCH_DEPTHS = ("basic", "advanced")
ANSWER_MODES = ("basic", "advanced")
RAW_CONTENT_MODES = ("markdown", "text")


def _as_number(value: Any) -> float | None:
    """Coerce ints, floats and numeric strings; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _as_flag(value: Any, modes: tuple[str, ...], default: bool | str) -> bool | str:
    """Accept a boolean or one of the named modes."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
        if lowered in modes:
            return lowered
    return default


class Settings(BaseSettings):
    """Tavily integration settings."""

    model_config = SettingsConfigDict(
        env_prefix="TAVILY_", env_file=".env", extra="ignore"
    )

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL

    # Search defaults
    search_depth: str = DEFAULT_SEARCH_DEPTH
    max_results: int = DEFAULT_MAX_RESULTS
    include_answer: bool | str = True
    include_raw_content: bool | str = False

    # Transport and caching
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    cache_ttl_minutes: float = DEFAULT_CACHE_TTL_MINUTES
    cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    legacy_body_auth: bool = False

    # Research polling policy
    research_poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    research_max_wait_seconds: float = MAX_RESEARCH_WAIT_SECONDS

    @field_validator("api_key", mode="before")
    @classmethod
    def _strip_api_key(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            return DEFAULT_BASE_URL
        return value.strip().rstrip("/")

    @field_validator("search_depth", mode="before")
    @classmethod
    def _search_depth(cls, value: Any) -> str:
        lowered = value.strip().lower() if isinstance(value, str) else ""
        return lowered if lowered in SEARCH_DEPTHS else DEFAULT_SEARCH_DEPTH

    @field_validator("max_results", mode="before")
    @classmethod
    def _max_results(cls, value: Any) -> int:
        number = _as_number(value)
        if number is None:
            return DEFAULT_MAX_RESULTS
        return max(1, min(MAX_RESULTS_CAP, math.floor(number)))

    @field_validator("include_answer", mode="before")
    @classmethod
    def _include_answer(cls, value: Any) -> bool | str:
        return _as_flag(value, ANSWER_MODES, True)

    @field_validator("include_raw_content", mode="before")
    @classmethod
    def _include_raw_content(cls, value: Any) -> bool | str:
        return _as_flag(value, RAW_CONTENT_MODES, False)

    @field_validator("timeout_seconds", mode="before")
    @classmethod
    def _timeout_seconds(cls, value: Any) -> int:
        number = _as_number(value)
        if number is None:
            return DEFAULT_TIMEOUT_SECONDS
        return max(1, math.floor(number))

    @field_validator("cache_ttl_minutes", mode="before")
    @classmethod
    def _cache_ttl_minutes(cls, value: Any) -> float:
        number = _as_number(value)
        if number is None:
            return DEFAULT_CACHE_TTL_MINUTES
        return max(0.0, number)

    @field_validator("cache_max_entries", mode="before")
    @classmethod
    def _cache_max_entries(cls, value: Any) -> int:
        number = _as_number(value)
        if number is None:
            return DEFAULT_CACHE_MAX_ENTRIES
        return max(1, math.floor(number))

    @field_validator("research_poll_interval_seconds", mode="before")
    @classmethod
    def _poll_interval(cls, value: Any) -> float:
        number = _as_number(value)
        if number is None or number <= 0:
            return DEFAULT_POLL_INTERVAL_SECONDS
        return number

    @field_validator("research_max_wait_seconds", mode="before")
    @classmethod
    def _research_max_wait(cls, value: Any) -> float:
        number = _as_number(value)
        if number is None:
            return MAX_RESEARCH_WAIT_SECONDS
        return max(MIN_RESEARCH_WAIT_SECONDS, min(MAX_RESEARCH_WAIT_SECONDS, number))

    @property
    def cache_ttl_seconds(self) -> float:
        """Cache TTL converted to seconds; 0 disables caching."""
        return self.cache_ttl_minutes * 60.0

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
