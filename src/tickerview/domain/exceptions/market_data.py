# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Market Data Domain Exceptions.

Synopsis:
    Error conditions raised while talking to the upstream price provider.
    Transport clients raise these; gateways catch them and return a
    :class:`~tickerview.domain.entities.bar.FetchError` built from
    :meth:`MarketDataError.public_message`, so nothing below crosses into the
    acquisition controller.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from typing import Any

from tickerview.domain.exceptions.base import DomainError


class MarketDataError(DomainError):
    """Common base for upstream market data failures."""

    code = "MARKET_DATA_ERROR"

    def public_message(self) -> str:
        """Return a message safe to show to an end user."""
        return "Failed to fetch market data."


class TransportError(MarketDataError):
    """Network, DNS or timeout failure before a response was received.

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "MARKET_DATA_TRANSPORT_ERROR"

    def public_message(self) -> str:
        """Return a message safe to show to an end user."""
        return "Could not reach the market data provider. Please try again."


class UpstreamStatusError(MarketDataError):
    """Upstream answered with a non-success HTTP status.

    Attributes:
        code: Stable, machine-readable error code.
        status: HTTP status code returned by the provider.
    """

    code = "MARKET_DATA_UPSTREAM_STATUS"

    def __init__(
        self, status: int, message: str = "", *, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message or f"HTTP error! status: {status}", details=details)
        self.status = status

    def public_message(self) -> str:
        """Return a message safe to show to an end user."""
        return f"Market data provider returned HTTP {self.status}."


class MalformedResponseError(MarketDataError):
    """Upstream payload is not JSON or does not match the expected shape.

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "UPSTREAM_SCHEMA_ERROR"

    def public_message(self) -> str:
        """Return a message safe to show to an end user."""
        return "Market data provider returned an unexpected response."
