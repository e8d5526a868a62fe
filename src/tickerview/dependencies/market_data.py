# src/tickerview/dependencies/market_data.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Dependency wiring for Market Data (gateways).

Overview:
    Builds the bar gateway used by the HTTP service and the CLI, and exposes a
    FastAPI dependency that yields it and closes any client it owns.

Design:
    * ``data_source=auto`` picks the real Polygon gateway when an API key is
      configured and the deterministic in-memory gateway otherwise (no key
      means we must not hit the network).
    * ``environment=test`` always selects the deterministic gateway unless a
      source is named explicitly.
    * The ``/stock-data`` endpoint never uses the proxy gateway: that would
      call itself.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass

from tickerview.adapters.gateways.deterministic_gateway import DeterministicBarGateway
from tickerview.adapters.gateways.polygon_gateway import PolygonBarGateway
from tickerview.adapters.gateways.proxy_gateway import StockDataProxyGateway
from tickerview.application.interfaces.bar_gateway import BarGateway
from tickerview.config.settings import DataSource, Environment, Settings
from tickerview.infrastructure.external_apis.polygon.client import PolygonClient
from tickerview.infrastructure.external_apis.polygon.settings import PolygonSettings
from tickerview.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def get_settings() -> Settings:
    """Shim so tests can patch settings resolution in this module."""
    from tickerview.config.settings import get_settings as core_get_settings

    return core_get_settings()


def get_polygon_settings() -> PolygonSettings:
    """Load Polygon settings from the environment."""
    return PolygonSettings()


async def _noop_close() -> None:
    return None


@dataclass(frozen=True)
class GatewayBundle:
    """A gateway plus the coroutine that releases what it owns."""

    gateway: BarGateway
    source: DataSource
    aclose: Callable[[], Awaitable[None]] = _noop_close


def resolve_data_source(settings: Settings, polygon: PolygonSettings) -> DataSource:
    """Resolve ``auto`` into a concrete data source."""
    if settings.data_source is not DataSource.AUTO:
        return settings.data_source
    if settings.environment is Environment.TEST or not polygon.has_api_key:
        return DataSource.DETERMINISTIC
    return DataSource.POLYGON


def build_gateway(
    settings: Settings,
    polygon: PolygonSettings,
    *,
    allow_proxy: bool = True,
) -> GatewayBundle:
    """Construct the configured bar gateway.

    Args:
        settings: Application settings.
        polygon: Provider settings (page size, key, timeout).
        allow_proxy: False when building for the proxy endpoint itself.

    Raises:
        ValueError: If the Polygon source is selected without an API key, or
            the proxy source is selected where it is not allowed.
    """
    source = resolve_data_source(settings, polygon)

    if source is DataSource.POLYGON:
        if not polygon.has_api_key:
            raise ValueError("POLYGON_API_KEY is required for the polygon data source")
        client = PolygonClient(polygon)
        gateway: BarGateway = PolygonBarGateway(
            client,
            page_size=polygon.page_size,
            lookback_years=polygon.lookback_years,
        )
        bundle = GatewayBundle(gateway=gateway, source=source, aclose=client.aclose)
    elif source is DataSource.PROXY:
        if not allow_proxy:
            raise ValueError("the proxy data source cannot serve /stock-data itself")
        proxy = StockDataProxyGateway(settings.proxy_base_url, timeout_s=polygon.timeout_s)
        bundle = GatewayBundle(gateway=proxy, source=source, aclose=proxy.aclose)
    else:
        bundle = GatewayBundle(
            gateway=DeterministicBarGateway(page_size=polygon.page_size),
            source=DataSource.DETERMINISTIC,
        )

    logger.info("gateway_selected", extra={"extra": {"source": bundle.source.value}})
    return bundle


async def get_bar_gateway() -> AsyncGenerator[BarGateway, None]:
    """FastAPI dependency yielding the gateway behind ``/stock-data``."""
    import tickerview.dependencies.market_data as md

    bundle = build_gateway(md.get_settings(), md.get_polygon_settings(), allow_proxy=False)
    try:
        yield bundle.gateway
    finally:
        await bundle.aclose()
