# src/tickerview/adapters/gateways/polygon_gateway.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: Polygon daily aggregates -> paginated bar pages.

This gateway sits on top of the Polygon transport client and implements the
:class:`~tickerview.application.interfaces.bar_gateway.BarGateway` port:

* Derives ``limit``/``offset`` from a fixed page size.
* Requests the most recent ``lookback_years`` calendar years through today,
  ascending by time.
* Maps records to :class:`Bar` once, here.
* Converts every transport/status/shape failure into a :class:`FetchError`.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime

from tickerview.adapters.mappers.bar_mapper import bars_from_records
from tickerview.domain.entities.bar import FetchError, FetchResult, Page
from tickerview.domain.exceptions.market_data import MarketDataError
from tickerview.infrastructure.external_apis.polygon.client import PolygonClient
from tickerview.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def _utc_today() -> date:
    return datetime.now(tz=UTC).date()


def years_before(day: date, years: int) -> date:
    """Return ``day`` shifted back by ``years`` calendar years.

    February 29 maps to February 28 in non-leap target years.
    """
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


class PolygonBarGateway:
    """Direct provider access implementing the bar gateway port."""

    def __init__(
        self,
        client: PolygonClient,
        *,
        page_size: int = 100,
        lookback_years: int = 2,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        """Initialize the gateway.

        Args:
            client: Polygon transport client.
            page_size: Bars per page; also the ``has_more`` threshold.
            lookback_years: Calendar years of history ending today.
            today: Clock returning the window's end date.
        """
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._client = client
        self._page_size = page_size
        self._lookback_years = lookback_years
        self._today = today

    @property
    def page_size(self) -> int:
        """Return the fixed page size."""
        return self._page_size

    def offset_for(self, page: int) -> int:
        """Return the zero-based record offset for a 1-based ``page``."""
        return (page - 1) * self._page_size

    async def fetch(self, symbol: str, page: int) -> FetchResult:
        """Fetch one page of daily bars for ``symbol``.

        Args:
            symbol: Non-empty ticker symbol.
            page: 1-based page index.

        Returns:
            A :class:`Page` on success or a :class:`FetchError` on any failure.
        """
        if not symbol.strip() or page < 1:
            return FetchError("A symbol and a positive page number are required.")

        date_to = self._today()
        date_from = years_before(date_to, self._lookback_years)
        try:
            records = await self._client.daily_aggregates(
                symbol=symbol.strip().upper(),
                date_from=date_from,
                date_to=date_to,
                limit=self._page_size,
                offset=self.offset_for(page),
            )
            bars = bars_from_records(records)
        except MarketDataError as exc:
            logger.warning(
                "polygon_fetch_failed",
                extra={
                    "extra": {
                        "symbol": symbol,
                        "page": page,
                        "code": exc.code,
                        "error": str(exc),
                    }
                },
            )
            return FetchError(exc.public_message())

        return Page(bars=bars, page=page, has_more=len(bars) == self._page_size)
