# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Application Port: Chart rendering surface.

The rendering engine is an opaque sink for OHLC series. This port captures the
lifecycle the view composition code drives:

    create(container) -> set_series(bars)* / resize(width)* -> destroy()

The surface keeps no history of its own: every ``set_series`` call carries the
complete bar sequence, never a delta.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from tickerview.domain.entities.bar import Bar


@runtime_checkable
class ChartSurface(Protocol):
    """Capability interface for a candlestick rendering surface."""

    def create(self, container: Any) -> None:
        """Allocate the native chart inside ``container``."""
        ...

    def set_series(self, bars: Sequence[Bar]) -> None:
        """Replace the rendered series with the complete ``bars`` sequence."""
        ...

    def resize(self, width: int) -> None:
        """Re-layout the chart at ``width`` (container units)."""
        ...

    def destroy(self) -> None:
        """Release every resource held by the chart."""
        ...
