# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Acquisition State (Domain Entities).

Synopsis:
    The mutable state owned by the acquisition controller, its status
    enumeration, and the frozen snapshot handed to views after every
    transition.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from tickerview.domain.entities.bar import Bar


class AcquisitionStatus(str, Enum):
    """Loading state machine states.

    Attributes:
        IDLE: Nothing requested yet.
        LOADING: A fetch for the live request stream is in flight.
        LOADED: The last applied fetch succeeded.
        ERROR: The last applied fetch failed.
    """

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return the canonical string representation for this status."""
        return self.value


def normalize_symbol(raw: str) -> str:
    """Strip and upper-case a ticker symbol.

    Raises:
        ValueError: If the symbol is empty after stripping.
    """
    symbol = raw.strip().upper()
    if not symbol:
        raise ValueError("symbol must be a non-empty string.")
    return symbol


@dataclass
class AcquisitionState:
    """Controller-owned acquisition state.

    ``bars`` is append-only within a symbol and cleared whenever the symbol
    changes. Only the acquisition controller mutates instances of this class.
    """

    symbol: str
    page: int = 1
    bars: list[Bar] = field(default_factory=list)
    status: AcquisitionStatus = AcquisitionStatus.IDLE
    has_more: bool = True
    error_message: str | None = None

    def snapshot(self) -> AcquisitionSnapshot:
        """Return a frozen copy suitable for handing to a view."""
        return AcquisitionSnapshot(
            symbol=self.symbol,
            bars=tuple(self.bars),
            status=self.status,
            has_more=self.has_more,
            error_message=self.error_message,
            page=self.page,
        )


@dataclass(frozen=True, slots=True)
class AcquisitionSnapshot:
    """Read-only view of :class:`AcquisitionState` at one point in time."""

    symbol: str
    bars: tuple[Bar, ...]
    status: AcquisitionStatus
    has_more: bool
    error_message: str | None
    page: int

    @property
    def is_loading(self) -> bool:
        """Return True while a fetch is in flight."""
        return self.status is AcquisitionStatus.LOADING

    @property
    def can_load_more(self) -> bool:
        """Return True when a "load more" intent would issue a fetch."""
        return self.has_more and not self.is_loading
