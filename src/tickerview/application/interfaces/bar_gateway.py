# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Application Port: Bar gateway.

This interface defines the single provider-agnostic retrieval capability the
acquisition controller depends on, without binding to any provider, HTTP
client or proxy.

Design:
    * One call per invocation, no internal retry.
    * Never raises for provider failures: a :class:`FetchError` value is
      returned instead.
    * Stateless; safe to call concurrently for different symbols/pages.
"""

from __future__ import annotations

from typing import Protocol

from tickerview.domain.entities.bar import FetchResult


class BarGateway(Protocol):
    """Protocol for paginated historical bar retrieval."""

    async def fetch(self, symbol: str, page: int) -> FetchResult:
        """Fetch one page of bars.

        Args:
            symbol: Upper-cased ticker symbol.
            page: 1-based page index.

        Returns:
            The normalized :class:`Page`, or a :class:`FetchError` describing
            why the page could not be retrieved.
        """
        ...
