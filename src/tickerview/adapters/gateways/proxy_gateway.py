# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: same-origin ``/stock-data`` proxy -> paginated bar pages.

Clients that must not hold the provider API key fetch through the service's
own ``GET /stock-data?symbol=&page=`` endpoint. The proxy already applies the
provider page size and reports ``hasMore``; this gateway only validates the
envelope and maps the short-field records.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from tickerview.adapters.mappers.bar_mapper import bars_from_records
from tickerview.domain.entities.bar import FetchError, FetchResult, Page
from tickerview.domain.exceptions.market_data import (
    MalformedResponseError,
    MarketDataError,
    TransportError,
    UpstreamStatusError,
)
from tickerview.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class StockDataProxyGateway:
    """Bar gateway that talks to a ``/stock-data`` endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        http: httpx.AsyncClient | None = None,
        timeout_s: float = 8.0,
    ) -> None:
        """Initialize the gateway.

        Args:
            base_url: Origin serving ``/stock-data`` (e.g. ``http://localhost:8080``).
            http: Optional shared client; one is created and owned otherwise.
            timeout_s: Per-request timeout in seconds.
        """
        self._url = f"{base_url.rstrip('/')}/stock-data"
        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(timeout=timeout_s)
        self._timeout = timeout_s

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def fetch(self, symbol: str, page: int) -> FetchResult:
        """Fetch one page through the proxy.

        Returns:
            A :class:`Page` on success or a :class:`FetchError` on any failure.
        """
        if not symbol.strip() or page < 1:
            return FetchError("A symbol and a positive page number are required.")
        try:
            body = await self._get(symbol.strip().upper(), page)
            return self._to_page(body, page)
        except MarketDataError as exc:
            logger.warning(
                "proxy_fetch_failed",
                extra={"extra": {"symbol": symbol, "page": page, "code": exc.code}},
            )
            return FetchError(exc.public_message())

    async def _get(self, symbol: str, page: int) -> Mapping[str, Any]:
        try:
            response = await self._client.get(
                self._url,
                params={"symbol": symbol, "page": str(page)},
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            raise TransportError("Network error while contacting the proxy") from exc

        if not response.is_success:
            raise UpstreamStatusError(response.status_code)
        try:
            body: Any = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Proxy returned a non-JSON payload") from exc
        if not isinstance(body, Mapping):
            raise MalformedResponseError("Proxy payload is not an object")
        return body

    @staticmethod
    def _to_page(body: Mapping[str, Any], page: int) -> Page:
        if body.get("status") != "success":
            raise MalformedResponseError(
                "Proxy reported a failure", details={"message": body.get("message")}
            )
        data = body.get("data")
        has_more = body.get("hasMore")
        if not isinstance(data, list) or not isinstance(has_more, bool):
            raise MalformedResponseError(
                "Proxy envelope has an unexpected shape",
                details={"expected": "data:list, hasMore:bool"},
            )
        return Page(bars=bars_from_records(data), page=page, has_more=has_more)
