# src/tickerview/adapters/views/surfaces.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Concrete rendering surfaces.

Two implementations of :class:`~tickerview.application.interfaces.chart_surface.ChartSurface`:

* :class:`TerminalCandlestickSurface` draws the most recent bars as a text
  candlestick chart, one column per bar, through ``typer.echo``.
* :class:`RecordingSurface` records every lifecycle call; used for embedding
  hosts that render elsewhere and for tests.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import typer

from tickerview.domain.entities.bar import Bar


def _day(bar: Bar) -> str:
    return datetime.fromtimestamp(bar.epoch_seconds, UTC).strftime("%Y-%m-%d")


class SurfaceStateError(RuntimeError):
    """Raised when a surface is driven outside its lifecycle."""


class TerminalCandlestickSurface:
    """Text candlestick chart written to the terminal.

    The newest ``width`` bars are drawn. Up bars use ``█`` for the body and
    down bars ``░``; wicks are ``│``.
    """

    UP_BODY = "█"
    DOWN_BODY = "░"
    WICK = "│"

    def __init__(
        self,
        *,
        height: int = 12,
        echo: Callable[[str], Any] = typer.echo,
        default_width: int = 60,
    ) -> None:
        if height < 2:
            raise ValueError("height must be >= 2")
        self._height = height
        self._echo = echo
        self._width = default_width
        self._bars: tuple[Bar, ...] = ()
        self._title = ""
        self._alive = False

    @property
    def width(self) -> int:
        return self._width

    def create(self, container: Any) -> None:
        if self._alive:
            raise SurfaceStateError("surface already created")
        self._title = str(container) if container is not None else ""
        self._alive = True

    def set_series(self, bars: Sequence[Bar]) -> None:
        self._require_alive()
        self._bars = tuple(bars)
        self._draw()

    def resize(self, width: int) -> None:
        self._require_alive()
        self._width = max(1, int(width))
        if self._bars:
            self._draw()

    def destroy(self) -> None:
        self._require_alive()
        self._alive = False
        self._bars = ()

    def render_lines(self) -> list[str]:
        """Return the chart rows for the current series, top row first."""
        visible = self._bars[-self._width :]
        if not visible:
            return []

        top = max(bar.high for bar in visible)
        bottom = min(bar.low for bar in visible)
        span = top - bottom
        rows = self._height

        def to_row(price: float) -> int:
            if span <= 0:
                return rows // 2
            # Row 0 is the top of the chart.
            return round((top - price) / span * (rows - 1))

        grid = [[" "] * len(visible) for _ in range(rows)]
        for col, bar in enumerate(visible):
            body_hi = to_row(max(bar.open, bar.close))
            body_lo = to_row(min(bar.open, bar.close))
            body = self.UP_BODY if bar.close >= bar.open else self.DOWN_BODY
            for row in range(to_row(bar.high), to_row(bar.low) + 1):
                grid[row][col] = body if body_hi <= row <= body_lo else self.WICK

        return ["".join(row) for row in grid]

    def _draw(self) -> None:
        lines = self.render_lines()
        if not lines:
            return
        visible = self._bars[-self._width :]
        first, last = visible[0], visible[-1]
        header = (
            f"{self._title}  {_day(first)}..{_day(last)}  "
            f"{len(self._bars)} bars  last close {last.close:.2f}"
        )
        self._echo(header.strip())
        for line in lines:
            self._echo(line)

    def _require_alive(self) -> None:
        if not self._alive:
            raise SurfaceStateError("surface is not created")


@dataclass
class RecordingSurface:
    """Surface that records lifecycle calls as ``(name, argument)`` tuples."""

    calls: list[tuple[str, Any]] = field(default_factory=list)

    def create(self, container: Any) -> None:
        self.calls.append(("create", container))

    def set_series(self, bars: Sequence[Bar]) -> None:
        self.calls.append(("set_series", tuple(bars)))

    def resize(self, width: int) -> None:
        self.calls.append(("resize", width))

    def destroy(self) -> None:
        self.calls.append(("destroy", None))

    def count(self, name: str) -> int:
        """Return how many times lifecycle method ``name`` was called."""
        return sum(1 for call, _ in self.calls if call == name)

    @property
    def series(self) -> tuple[Bar, ...] | None:
        """Return the most recently supplied series, if any."""
        for call, arg in reversed(self.calls):
            if call == "set_series":
                return arg
        return None
