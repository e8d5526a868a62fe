# src/tickerview/adapters/routers/metrics_router.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Prometheus scrape endpoint (`/metrics`).

The provider fetch histogram is created at import of the metrics module, so
its series are present on the first scrape even before any upstream call.

Layer:
    adapters/routers
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

# Imported for registration side effects.
import tickerview.infrastructure.observability.metrics_market_data  # noqa: F401

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def metrics_probe() -> Response:
    """Expose Prometheus metrics in text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
