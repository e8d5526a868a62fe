# src/tickerview/infrastructure/observability/metrics_market_data.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Market Data observability helpers and Prometheus metrics.

Collectors (names are part of the public contract):

* ``tickerview_market_data_fetch_latency_seconds`` (Histogram)
* ``tickerview_market_data_errors_total`` (Counter)
* ``tickerview_market_data_http_status_total`` (Counter)

Helper:

* :func:`observe_upstream_request` wraps one upstream call, records a latency
  sample, and counts an error when the call fails.

All collectors are created against the current default registry and reused
if a collector with the same name already exists there (module re-imports
under test runners).
"""

from __future__ import annotations

from collections.abc import Generator, Sequence
from contextlib import contextmanager, suppress
from dataclasses import dataclass, field
from time import perf_counter

import prometheus_client as prom
from prometheus_client import Counter, Histogram


def _existing(name: str) -> object | None:
    """Return a collector already registered under ``name``, if any."""
    mapping = getattr(prom.REGISTRY, "_names_to_collectors", {})
    return mapping.get(name)


def _get_or_create_histogram(name: str, doc: str, labelnames: Sequence[str]) -> Histogram:
    """Return a histogram bound to the current default registry (idempotent)."""
    existing = _existing(name)
    if isinstance(existing, Histogram):
        return existing
    try:
        return Histogram(name, doc, tuple(labelnames), registry=prom.REGISTRY)
    except ValueError as exc:
        again = _existing(name)
        if "Duplicated timeseries" in str(exc) and isinstance(again, Histogram):
            return again
        raise


def _get_or_create_counter(name: str, doc: str, labelnames: Sequence[str]) -> Counter:
    """Return a counter bound to the current default registry (idempotent)."""
    # prometheus_client registers counters under the ``_total``-less name too.
    existing = _existing(name) or _existing(name.removesuffix("_total"))
    if isinstance(existing, Counter):
        return existing
    try:
        return Counter(name, doc, tuple(labelnames), registry=prom.REGISTRY)
    except ValueError as exc:
        again = _existing(name) or _existing(name.removesuffix("_total"))
        if "Duplicated timeseries" in str(exc) and isinstance(again, Counter):
            return again
        raise


market_data_fetch_latency_seconds: Histogram = _get_or_create_histogram(
    "tickerview_market_data_fetch_latency_seconds",
    "Latency of upstream bar page fetches (seconds).",
    labelnames=("provider", "outcome"),
)

market_data_errors_total: Counter = _get_or_create_counter(
    "tickerview_market_data_errors_total",
    "Upstream bar fetch failures by reason.",
    labelnames=("provider", "reason"),
)

market_data_http_status_total: Counter = _get_or_create_counter(
    "tickerview_market_data_http_status_total",
    "HTTP status codes returned by the upstream provider.",
    labelnames=("provider", "status_code"),
)


@dataclass
class UpstreamObservation:
    """State captured while observing one upstream call.

    Attributes:
        provider: Upstream provider identifier (label).
        start: Monotonic start time in seconds.
        outcome: ``"success"`` or ``"error"``.
        error_reason: Short machine-readable reason when the call failed.
    """

    provider: str
    start: float = field(default_factory=perf_counter)
    outcome: str = "success"
    error_reason: str | None = None

    def mark_error(self, reason: str) -> None:
        """Mark the call as failed with ``reason``."""
        self.outcome = "error"
        self.error_reason = reason


@contextmanager
def observe_upstream_request(*, provider: str) -> Generator[UpstreamObservation, None, None]:
    """Observe one upstream request.

    Exceptions escaping the block are re-raised after being recorded with the
    exception class name as the reason.

    Args:
        provider: Upstream provider identifier (e.g. ``"polygon"``).

    Yields:
        A mutable :class:`UpstreamObservation`.
    """
    obs = UpstreamObservation(provider=provider)
    try:
        yield obs
    except Exception as exc:
        if obs.error_reason is None:
            obs.mark_error(type(exc).__name__)
        raise
    finally:
        elapsed = perf_counter() - obs.start
        with suppress(Exception):
            market_data_fetch_latency_seconds.labels(
                provider=obs.provider, outcome=obs.outcome
            ).observe(elapsed)
            if obs.error_reason is not None:
                market_data_errors_total.labels(
                    provider=obs.provider, reason=obs.error_reason
                ).inc()


def record_http_status(provider: str, status_code: int) -> None:
    """Count one upstream HTTP status (best effort)."""
    with suppress(Exception):
        market_data_http_status_total.labels(
            provider=provider, status_code=str(status_code)
        ).inc()
