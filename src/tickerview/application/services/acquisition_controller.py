# src/tickerview/application/services/acquisition_controller.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Acquisition Controller: incremental bar loading state machine.

Synopsis:
    Owns the symbol, page cursor, loading/error flags and the accumulated bar
    sequence for one view. Drives a :class:`BarGateway` on symbol change,
    refresh and "load more" intents, merges pages, and publishes a frozen
    snapshot to subscribers after every transition.

State machine:
    ``idle -> loading -> {loaded, error}``; ``loaded`` and ``error`` re-enter
    ``loading`` on the next request.

Concurrency:
    Runs on a single asyncio loop. Intent methods are synchronous: they record
    the request, move to ``loading`` and schedule a task that awaits the
    gateway. Completion re-enters through :meth:`on_fetch_result`, which
    discards results that no longer match the current request context.
    Every replace load (start, symbol switch, refresh) opens a new request
    generation; results tagged with an older generation are stale.
    In-flight calls are never cancelled by new intents.

Layer:
    application/services
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from tickerview.application.interfaces.bar_gateway import BarGateway
from tickerview.domain.entities.acquisition import (
    AcquisitionSnapshot,
    AcquisitionState,
    AcquisitionStatus,
    normalize_symbol,
)
from tickerview.domain.entities.bar import FetchError, FetchResult
from tickerview.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

SnapshotListener = Callable[[AcquisitionSnapshot], None]

_UNEXPECTED_FAILURE_MESSAGE = "Failed to fetch data. Please try again."


@dataclass(frozen=True, slots=True)
class FetchRequest:
    """Tag recorded for every issued fetch.

    Attributes:
        symbol: Symbol the fetch was issued for.
        page: Page index requested.
        append: True for "load more" (concatenate), False for replace.
        generation: Request generation the fetch belongs to.
    """

    symbol: str
    page: int
    append: bool
    generation: int = 0


class AcquisitionController:
    """State machine that keeps an accumulated bar sequence in sync with intents."""

    def __init__(self, gateway: BarGateway, *, default_symbol: str = "AAPL") -> None:
        """Initialize the controller.

        Args:
            gateway: Bar gateway used for every fetch.
            default_symbol: Symbol selected at construction (normalized).
        """
        self._gateway = gateway
        self._state = AcquisitionState(symbol=normalize_symbol(default_symbol))
        self._listeners: list[SnapshotListener] = []
        self._tasks: set[asyncio.Task[None]] = set()
        self._last_request: FetchRequest | None = None
        self._generation = 0

    # ------------------------------------------------------------------ #
    # Read side
    # ------------------------------------------------------------------ #
    @property
    def snapshot(self) -> AcquisitionSnapshot:
        """Return the current read-only snapshot."""
        return self._state.snapshot()

    @property
    def last_request(self) -> FetchRequest | None:
        """Return the most recently issued fetch tag, if any."""
        return self._last_request

    @property
    def generation(self) -> int:
        """Return the current request generation."""
        return self._generation

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register ``listener`` for snapshots published after each transition.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------ #
    # Intents
    # ------------------------------------------------------------------ #
    def start(self) -> None:
        """Issue the initial page-1 load for the current symbol.

        No-op unless the controller is still idle.
        """
        if self._state.status is not AcquisitionStatus.IDLE:
            return
        self._issue(page=1, append=False, new_generation=True)

    def set_symbol(self, new_symbol: str) -> None:
        """Switch to ``new_symbol`` and load its first page.

        No-op when the normalized symbol equals the current one.

        Raises:
            ValueError: If ``new_symbol`` is blank.
        """
        symbol = normalize_symbol(new_symbol)
        if symbol == self._state.symbol:
            return

        self._state.symbol = symbol
        self._state.bars = []
        self._state.page = 1
        self._state.has_more = True
        self._state.error_message = None
        self._issue(page=1, append=False, new_generation=True)

    def refresh(self) -> None:
        """Re-fetch page 1 of the current symbol and replace the bars on success.

        No-op while a fetch is in flight.
        """
        if self._state.status is AcquisitionStatus.LOADING:
            return
        self._issue(page=1, append=False, new_generation=True)

    def load_more(self) -> None:
        """Fetch the next page and append it on success.

        No-op while loading or when the provider reported no further pages.
        With no bars loaded yet (a failed first load or symbol switch) there is
        nothing to append to, so page 1 is loaded as a replace instead.
        """
        if self._state.status is AcquisitionStatus.LOADING or not self._state.has_more:
            return
        if not self._state.bars:
            self._issue(page=1, append=False, new_generation=True)
            return
        self._issue(page=self._state.page + 1, append=True)

    # ------------------------------------------------------------------ #
    # Completion entry point
    # ------------------------------------------------------------------ #
    def on_fetch_result(
        self,
        request_symbol: str,
        request_page: int,
        append: bool,
        result: FetchResult,
        *,
        generation: int | None = None,
    ) -> bool:
        """Apply a fetch outcome unless it is stale.

        A result is stale when it belongs to an older request generation, when
        its symbol no longer matches the current symbol, or when it is an
        append for anything other than the page directly after the last
        applied one.

        Args:
            request_symbol: Symbol the fetch was issued for.
            request_page: Page index the fetch was issued for.
            append: Merge policy recorded when the fetch was issued.
            result: Gateway outcome.
            generation: Generation recorded when the fetch was issued. Defaults
                to the current generation.

        Returns:
            True if the result changed state, False if it was discarded.
        """
        state = self._state
        if generation is not None and generation != self._generation:
            logger.info(
                "fetch_discarded_stale_generation",
                extra={
                    "extra": {
                        "symbol": request_symbol,
                        "page": request_page,
                        "generation": generation,
                        "current_generation": self._generation,
                    }
                },
            )
            return False
        if request_symbol != state.symbol:
            logger.info(
                "fetch_discarded_stale_symbol",
                extra={
                    "extra": {
                        "request_symbol": request_symbol,
                        "current_symbol": state.symbol,
                        "page": request_page,
                    }
                },
            )
            return False
        if append and request_page != state.page + 1:
            logger.info(
                "fetch_discarded_out_of_order",
                extra={
                    "extra": {
                        "symbol": request_symbol,
                        "page": request_page,
                        "applied_page": state.page,
                    }
                },
            )
            return False

        if isinstance(result, FetchError):
            state.status = AcquisitionStatus.ERROR
            state.error_message = result.message
            logger.warning(
                "fetch_failed",
                extra={
                    "extra": {
                        "symbol": request_symbol,
                        "page": request_page,
                        "error": result.message,
                    }
                },
            )
        else:
            if append:
                state.bars.extend(result.bars)
            else:
                state.bars = list(result.bars)
            state.page = request_page
            state.has_more = result.has_more
            state.status = AcquisitionStatus.LOADED
            state.error_message = None
            logger.info(
                "fetch_applied",
                extra={
                    "extra": {
                        "symbol": request_symbol,
                        "page": request_page,
                        "append": append,
                        "received": len(result.bars),
                        "total": len(state.bars),
                        "has_more": result.has_more,
                    }
                },
            )

        self._publish()
        return True

    # ------------------------------------------------------------------ #
    # Task lifecycle
    # ------------------------------------------------------------------ #
    async def wait_idle(self) -> None:
        """Wait until every scheduled fetch task has completed."""
        while self._tasks:
            await asyncio.gather(*tuple(self._tasks))

    async def aclose(self) -> None:
        """Cancel outstanding fetch tasks and wait for them to unwind."""
        tasks = tuple(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._listeners.clear()

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _issue(self, *, page: int, append: bool, new_generation: bool = False) -> None:
        """Record a request, enter ``loading`` and schedule the fetch."""
        if new_generation:
            self._generation += 1
        request = FetchRequest(
            symbol=self._state.symbol,
            page=page,
            append=append,
            generation=self._generation,
        )
        self._last_request = request
        self._state.status = AcquisitionStatus.LOADING
        self._state.error_message = None
        logger.info(
            "fetch_issued",
            extra={
                "extra": {
                    "symbol": request.symbol,
                    "page": page,
                    "append": append,
                    "generation": request.generation,
                }
            },
        )
        self._publish()

        task = asyncio.get_running_loop().create_task(self._run(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, request: FetchRequest) -> None:
        """Await the gateway for ``request`` and hand the outcome back."""
        try:
            result = await self._gateway.fetch(request.symbol, request.page)
        except Exception:
            # Gateways report failures as values; anything raised is a bug.
            logger.exception(
                "gateway_raised",
                extra={"extra": {"symbol": request.symbol, "page": request.page}},
            )
            result = FetchError(_UNEXPECTED_FAILURE_MESSAGE)
        self.on_fetch_result(
            request.symbol,
            request.page,
            request.append,
            result,
            generation=request.generation,
        )

    def _publish(self) -> None:
        """Push the current snapshot to every subscriber."""
        snap = self._state.snapshot()
        for listener in tuple(self._listeners):
            listener(snap)
