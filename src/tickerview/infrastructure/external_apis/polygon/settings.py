# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Pydantic settings for the Polygon.io transport client."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class PolygonSettings(BaseSettings):
    """Configuration for the Polygon aggregates client.

    Environment variables (with ``model_config.env_prefix``):

    * ``POLYGON_BASE_URL``
    * ``POLYGON_API_KEY``
    * ``POLYGON_TIMEOUT_S``
    * ``POLYGON_PAGE_SIZE``
    * ``POLYGON_LOOKBACK_YEARS``
    """

    base_url: str = Field(
        "https://api.polygon.io",
        description="Base URL for the Polygon REST API.",
    )
    api_key: SecretStr = Field(
        SecretStr(""),
        description="Polygon API key. Empty selects the deterministic gateway.",
    )
    timeout_s: float = Field(
        8.0,
        gt=0,
        description="Per-request timeout in seconds; the only bound on a hung fetch.",
    )
    page_size: int = Field(
        100,
        ge=1,
        le=50_000,
        description="Bars requested per page (the provider ``limit``).",
    )
    lookback_years: int = Field(
        2,
        ge=1,
        description="Calendar years of history requested, ending today.",
    )

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="POLYGON_",
        extra="ignore",
    )

    @property
    def has_api_key(self) -> bool:
        """Return True when a non-blank API key is configured."""
        return bool(self.api_key.get_secret_value().strip())
