# src/tickerview/adapters/views/chart_view.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Chart View: binds an acquisition controller to a rendering surface.

Synopsis:
    Subscribes to controller snapshots and drives a :class:`ChartSurface`
    through its lifecycle.

Lifecycle:
    * The surface is created lazily, on the first snapshot carrying bars.
    * After creation, every change of the bar sequence re-supplies the
      complete sequence. Snapshots without bars (a symbol switch in flight)
      leave the rendered series untouched.
    * ``resize`` forwards the container width whenever the surface exists,
      regardless of data; a width received before creation is applied right
      after ``create``.
    * ``close`` unsubscribes and destroys the surface at most once.

Layer:
    adapters/views
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

from tickerview.application.interfaces.chart_surface import ChartSurface
from tickerview.application.services.acquisition_controller import AcquisitionController
from tickerview.domain.entities.acquisition import AcquisitionSnapshot
from tickerview.domain.entities.bar import Bar
from tickerview.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class ChartView:
    """Keeps a rendering surface in sync with one controller."""

    def __init__(
        self,
        controller: AcquisitionController,
        surface: ChartSurface,
        container: Any,
        *,
        width: int | None = None,
    ) -> None:
        """Bind ``surface`` to ``controller`` and render the current snapshot.

        Args:
            controller: Source of snapshots.
            surface: Rendering surface to drive.
            container: Opaque host handed to ``surface.create``.
            width: Initial container width, if known.
        """
        self._controller = controller
        self._surface = surface
        self._container = container
        self._width = width
        self._created = False
        self._closed = False
        self._rendered: tuple[Bar, ...] = ()
        self._last: AcquisitionSnapshot = controller.snapshot
        self._unsubscribe = controller.subscribe(self._on_snapshot)
        self._on_snapshot(controller.snapshot)

    @property
    def created(self) -> bool:
        """Return True once the surface has been created."""
        return self._created

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_snapshot(self) -> AcquisitionSnapshot:
        """Return the most recent snapshot seen by the view."""
        return self._last

    def resize(self, width: int) -> None:
        """Record the container width and forward it if the surface exists."""
        self._width = width
        if self._created and not self._closed:
            self._surface.resize(width)

    def close(self) -> None:
        """Unsubscribe from the controller and destroy the surface once."""
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        if self._created:
            self._surface.destroy()
            logger.debug("chart_destroyed", extra={"extra": {"symbol": self._last.symbol}})

    def __enter__(self) -> ChartView:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _on_snapshot(self, snapshot: AcquisitionSnapshot) -> None:
        self._last = snapshot
        if self._closed or not snapshot.bars:
            return

        if not self._created:
            self._surface.create(self._container)
            self._created = True
            logger.debug("chart_created", extra={"extra": {"symbol": snapshot.symbol}})
            if self._width is not None:
                self._surface.resize(self._width)

        if snapshot.bars != self._rendered:
            self._surface.set_series(snapshot.bars)
            self._rendered = snapshot.bars
