# src/tickerview/config/settings.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Tickerview Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated application configuration. Provider credentials live in
    :class:`~tickerview.infrastructure.external_apis.polygon.settings.PolygonSettings`
    (``POLYGON_`` prefix); everything else is read here with the
    ``TICKERVIEW_`` prefix.

Design:
    - Pydantic v2 BaseSettings with explicit, constrained fields.
    - Environment enumeration for behavior toggles (includes TEST).
    - Singleton accessor `get_settings()` with LRU cache.
    - Safe, structured logging (no secrets).
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    STAGING = "staging"
    PRODUCTION = "production"


class DataSource(str, Enum):
    """Where bar pages come from.

    Attributes:
        AUTO: Polygon when an API key is configured, deterministic otherwise.
        POLYGON: Direct provider access (requires ``POLYGON_API_KEY``).
        PROXY: A ``/stock-data`` endpoint at ``proxy_base_url``.
        DETERMINISTIC: Network-free synthetic series.
    """

    AUTO = "auto"
    POLYGON = "polygon"
    PROXY = "proxy"
    DETERMINISTIC = "deterministic"


class Settings(BaseSettings):
    """Typed application configuration for Tickerview."""

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level name.",
    )
    default_symbol: str = Field(
        default="AAPL",
        min_length=1,
        description="Symbol selected when a controller is created.",
    )
    data_source: DataSource = Field(
        default=DataSource.AUTO,
        description="Gateway selection strategy.",
    )
    proxy_base_url: str = Field(
        default="http://127.0.0.1:8080",
        description="Origin serving /stock-data when data_source=proxy.",
    )
    cors_allow_origins_raw: str = Field(
        default="*",
        description="Comma-separated allowed CORS origins ('*' for any).",
    )
    cors_allow_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins, derived from cors_allow_origins_raw.",
    )

    model_config = SettingsConfigDict(
        env_prefix="TICKERVIEW_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("default_symbol")
    @classmethod
    def _normalize_default_symbol(cls, value: str) -> str:
        symbol = value.strip().upper()
        if not symbol:
            raise ValueError("default_symbol must not be blank")
        return symbol

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @model_validator(mode="after")
    def _compute_cors(self) -> Settings:
        """Derive the CORS origin list from the raw setting."""
        entries = [e.strip() for e in self.cors_allow_origins_raw.split(",") if e.strip()]
        self.cors_allow_origins = entries or ["*"]
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        logger.exception("Invalid application configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    logger.info(
        "settings_initialized",
        extra={
            "extra": {
                "environment": settings.environment.value,
                "data_source": settings.data_source.value,
                "default_symbol": settings.default_symbol,
                "cors_has_wildcard": "*" in settings.cors_allow_origins,
            }
        },
    )
    return settings
