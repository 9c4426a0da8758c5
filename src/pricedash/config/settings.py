"""
Application settings with environment variable support.

Uses Pydantic Settings for typed configuration loaded from the
environment (prefix PRICEDASH_) or a .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pricedash.config.constants import (
    DEFAULT_API_URL,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_FETCH_INTERVAL_MS,
    DEFAULT_HISTORY_CAPACITY,
    DEFAULT_REPORT_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
)
from pricedash.core.types import ResponseOrdering, Source, Symbol


class Settings(BaseSettings):
    """
    Dashboard settings loaded from environment variables.

    Every field can be overridden with PRICEDASH_<FIELD_NAME>.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRICEDASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Aggregation Endpoint
    # =========================================================================

    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="URL of the price aggregation endpoint",
    )

    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0.0,
        le=120.0,
        description="Total timeout for one upstream request in seconds",
    )

    # =========================================================================
    # Scheduling
    # =========================================================================

    fetch_interval_ms: int = Field(
        default=DEFAULT_FETCH_INTERVAL_MS,
        ge=10,
        le=3_600_000,
        description="Period of the recurring fetch timer in milliseconds",
    )

    debounce_ms: int = Field(
        default=DEFAULT_DEBOUNCE_MS,
        ge=0,
        le=10_000,
        description="Quiet window that coalesces bursts of fetch triggers",
    )

    fetch_on_start: bool = Field(
        default=True,
        description="Trigger one fetch as soon as the session starts",
    )

    response_ordering: ResponseOrdering = Field(
        default=ResponseOrdering.LATEST_REQUEST,
        description="Policy for fetches that complete out of order",
    )

    # =========================================================================
    # Selection & History
    # =========================================================================

    default_symbol: Symbol = Field(
        default=Symbol.BTCUSDT,
        description="Symbol active when the session starts",
    )

    initial_sources: list[Source] = Field(
        default_factory=list,
        description="Sources enabled when the session starts",
    )

    history_capacity: int = Field(
        default=DEFAULT_HISTORY_CAPACITY,
        ge=1,
        le=10_000,
        description="Number of history entries kept for charting",
    )

    # =========================================================================
    # Operation
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional file receiving DEBUG-level logs",
    )

    use_uvloop: bool = Field(
        default=True,
        description="Use uvloop for the event loop when it is installed",
    )

    report_interval: float = Field(
        default=DEFAULT_REPORT_INTERVAL,
        gt=0.0,
        description="Refresh period of the terminal reporter in seconds",
    )

    server_host: str = Field(default=DEFAULT_SERVER_HOST)
    server_port: int = Field(default=DEFAULT_SERVER_PORT, ge=1, le=65535)

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("api_url", mode="after")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Require an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be an http(s) URL, got {v!r}")
        return v

    @field_validator("initial_sources", mode="after")
    @classmethod
    def dedupe_sources(cls, v: list[Source]) -> list[Source]:
        """Drop repeated sources, keeping first occurrence."""
        return list(dict.fromkeys(v))

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def fetch_interval_seconds(self) -> float:
        return self.fetch_interval_ms / 1000.0

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Clear with `get_settings.cache_clear()` after changing the environment.
    """
    return Settings()
