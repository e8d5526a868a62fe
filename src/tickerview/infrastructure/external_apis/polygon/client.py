# src/tickerview/infrastructure/external_apis/polygon/client.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Polygon Transport Client: daily aggregates, async, single attempt.

This transport is framework-agnostic and provides:

* Async HTTP (httpx) with a per-request timeout.
* Exactly one GET per call; no retries (callers surface failures to users).
* Deterministic mapping to domain errors:
    - network / DNS / timeout       -> ``TransportError``
    - non-2xx status                 -> ``UpstreamStatusError``
    - non-JSON or wrong-shape body   -> ``MalformedResponseError``
* Prometheus latency/error/status metrics.

The API key travels in the ``Authorization`` header so it never appears in
request URLs or logs.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any, Final

import httpx

from tickerview.domain.exceptions.market_data import (
    MalformedResponseError,
    TransportError,
    UpstreamStatusError,
)
from tickerview.infrastructure.external_apis.polygon.settings import PolygonSettings
from tickerview.infrastructure.logging.logger import get_json_logger, get_request_id
from tickerview.infrastructure.observability.metrics_market_data import (
    observe_upstream_request,
    record_http_status,
)

logger = get_json_logger(__name__)

_PROVIDER: Final[str] = "polygon"

_DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Accept": "application/json",
    "User-Agent": "tickerview-polygon-client/1.0",
}


class PolygonClient:
    """Transport client for the Polygon ``/v2/aggs`` endpoint."""

    def __init__(
        self,
        settings: PolygonSettings,
        *,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport client.

        Args:
            settings: Provider settings loaded from environment or DI.
            http: Optional shared ``httpx.AsyncClient``. If omitted, a client
                is created and owned by this instance.
        """
        self._settings = settings
        self._base_url = str(settings.base_url).rstrip("/")
        self._timeout = float(settings.timeout_s)
        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(
            timeout=self._timeout,
            headers=_DEFAULT_HEADERS.copy(),
        )
        if http is not None:
            for key, value in _DEFAULT_HEADERS.items():
                self._client.headers.setdefault(key, value)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def daily_aggregates(
        self,
        *,
        symbol: str,
        date_from: date,
        date_to: date,
        limit: int,
        offset: int,
    ) -> list[Mapping[str, Any]]:
        """Fetch one page of daily aggregate records, ascending by time.

        Args:
            symbol: Ticker symbol (upper-cased by the caller).
            date_from: Inclusive start date.
            date_to: Inclusive end date.
            limit: Page size.
            offset: Number of records to skip.

        Returns:
            The raw ``results`` records (``t,o,h,l,c,v`` objects). A payload
            without ``results`` yields an empty list.

        Raises:
            TransportError: On network failure or timeout.
            UpstreamStatusError: On a non-2xx response.
            MalformedResponseError: On a non-JSON or wrongly shaped payload.
        """
        url = (
            f"{self._base_url}/v2/aggs/ticker/{symbol}/range/1/day/"
            f"{date_from.isoformat()}/{date_to.isoformat()}"
        )
        params = {"sort": "asc", "limit": limit, "offset": offset}
        headers = {"Authorization": f"Bearer {self._settings.api_key.get_secret_value()}"}
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        with observe_upstream_request(provider=_PROVIDER):
            try:
                response = await self._client.get(
                    url, params=params, headers=headers, timeout=self._timeout
                )
            except httpx.RequestError as exc:
                raise TransportError(
                    "Network error while contacting the market data provider",
                    details={"error": type(exc).__name__},
                ) from exc

            record_http_status(_PROVIDER, response.status_code)
            if not response.is_success:
                raise UpstreamStatusError(response.status_code)

            return self._parse_results(response)

    @staticmethod
    def _parse_results(response: httpx.Response) -> list[Mapping[str, Any]]:
        """Validate the payload shape and return its ``results`` list."""
        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                "Provider returned a non-JSON payload", details={"error": str(exc)}
            ) from exc

        if not isinstance(payload, Mapping):
            raise MalformedResponseError(
                "Provider payload is not an object", details={"expected": "object"}
            )
        if str(payload.get("status", "")).upper() == "ERROR":
            raise MalformedResponseError(
                "Provider reported an error",
                details={"error": payload.get("error") or payload.get("message")},
            )

        results = payload.get("results")
        if results is None:
            return []
        if not isinstance(results, list) or not all(isinstance(r, Mapping) for r in results):
            raise MalformedResponseError(
                "Provider results have an unexpected shape",
                details={"expected": "results:list[object]"},
            )
        return results
