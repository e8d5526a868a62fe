# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Deterministic, in-memory bar gateway for tests and local runs.

Used when no provider API key is configured (we must not hit the network) or
when explicitly selected. Each symbol gets a reproducible daily series seeded
from the symbol text, so repeated runs render the same chart.
"""

from __future__ import annotations

import hashlib
import random
from datetime import UTC, date, datetime, timedelta

from tickerview.domain.entities.bar import Bar, FetchError, FetchResult, Page


class DeterministicBarGateway:
    """Network-free gateway serving a fixed synthetic history per symbol."""

    def __init__(
        self,
        *,
        page_size: int = 100,
        history_days: int = 504,
        end: date | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            page_size: Bars per page.
            history_days: Trading days generated per symbol.
            end: Date of the last bar; defaults to 2025-01-02 for stable output.
        """
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._page_size = page_size
        self._history_days = history_days
        self._end = end or date(2025, 1, 2)
        self._store: dict[str, tuple[Bar, ...]] = {}

    @property
    def page_size(self) -> int:
        """Return the fixed page size."""
        return self._page_size

    async def fetch(self, symbol: str, page: int) -> FetchResult:
        """Return the requested slice of the symbol's synthetic series."""
        if not symbol.strip() or page < 1:
            return FetchError("A symbol and a positive page number are required.")
        series = self._series(symbol.strip().upper())
        offset = (page - 1) * self._page_size
        window = series[offset : offset + self._page_size]
        return Page(bars=window, page=page, has_more=len(window) == self._page_size)

    def _series(self, symbol: str) -> tuple[Bar, ...]:
        cached = self._store.get(symbol)
        if cached is not None:
            return cached

        seed = int.from_bytes(hashlib.sha256(symbol.encode("utf-8")).digest()[:8], "big")
        rng = random.Random(seed)
        days: list[date] = []
        cursor = self._end
        while len(days) < self._history_days:
            if cursor.weekday() < 5:
                days.append(cursor)
            cursor -= timedelta(days=1)
        days.reverse()

        price = 50.0 + (seed % 250)
        bars: list[Bar] = []
        for day in days:
            open_ = price
            close = max(1.0, open_ * (1.0 + rng.uniform(-0.03, 0.03)))
            high = max(open_, close) * (1.0 + rng.uniform(0.0, 0.015))
            low = min(open_, close) * (1.0 - rng.uniform(0.0, 0.015))
            ts = int(datetime(day.year, day.month, day.day, tzinfo=UTC).timestamp()) * 1000
            bars.append(
                Bar(
                    timestamp=ts,
                    open=round(open_, 2),
                    high=round(high, 2),
                    low=round(low, 2),
                    close=round(close, 2),
                    volume=float(rng.randint(100_000, 5_000_000)),
                )
            )
            price = close

        series = tuple(bars)
        self._store[symbol] = series
        return series


__all__ = ["DeterministicBarGateway"]
