# src/tickerview/domain/entities/bar.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Price Bars (Domain Entities).

Synopsis:
    Immutable primitives for OHLCV bars and the pages that carry them from the
    gateway to the acquisition controller, plus the failure value returned in
    place of a page.

Conventions:
    * ``Bar.timestamp`` is always integer milliseconds since the Unix epoch.
      Upstream seconds values are converted once, at the gateway boundary.
    * OHLC ordering (``low <= open, close <= high``) is expected but not
      enforced; only the shape is checked.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass

from tickerview.domain.entities.base import BaseEntity

# Anything below this is treated as seconds since epoch (year ~5138 in seconds).
_SECONDS_CUTOFF = 100_000_000_000


def to_epoch_millis(value: int | float) -> int:
    """Normalize an epoch timestamp in seconds or milliseconds to milliseconds.

    Args:
        value: Epoch timestamp in either unit.

    Returns:
        Integer milliseconds since the Unix epoch.
    """
    if abs(value) < _SECONDS_CUTOFF:
        return int(round(value * 1000))
    return int(value)


@dataclass(frozen=True, slots=True)
class Bar(BaseEntity):
    """A single OHLCV observation.

    Attributes:
        timestamp: Bar open time in milliseconds since epoch.
        open: Opening price.
        high: Highest traded price.
        low: Lowest traded price.
        close: Closing price.
        volume: Traded volume (must be >= 0).
    """

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    def __post_init__(self) -> None:
        """Enforce the volume invariant."""
        if self.volume < 0:
            raise ValueError("Bar.volume must be >= 0.")

    @property
    def epoch_seconds(self) -> int:
        """Return the timestamp in whole seconds (chart time axis unit)."""
        return self.timestamp // 1000


@dataclass(frozen=True, slots=True)
class Page(BaseEntity):
    """One batch of bars returned by a single paginated retrieval.

    Attributes:
        bars: Bars in ascending timestamp order.
        page: 1-based page index this batch satisfies.
        has_more: Whether a subsequent page may exist.
    """

    bars: tuple[Bar, ...]
    page: int
    has_more: bool

    def __post_init__(self) -> None:
        """Reject non-positive page indexes."""
        if self.page < 1:
            raise ValueError("Page.page must be >= 1.")


@dataclass(frozen=True, slots=True)
class FetchError:
    """Failure outcome of a gateway fetch, safe to show to a user.

    Attributes:
        message: Human-readable description of the failure.
    """

    message: str


type FetchResult = Page | FetchError

__all__ = ["Bar", "FetchError", "FetchResult", "Page", "to_epoch_millis"]
