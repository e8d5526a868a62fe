"""Routers Package Export (Adapters Layer).

Purpose:
    Stable exports for the routers mounted by the application factory.

Layer:
    adapters/routers
"""

from __future__ import annotations

from .health_router import router as health_router
from .metrics_router import router as metrics_router
from .stock_data_router import router as stock_data_router

__all__ = ["health_router", "metrics_router", "stock_data_router"]
