# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""HTTP schemas for the ``/stock-data`` endpoint.

Wire contract:
    200 -> ``{"status": "success", "data": [{t,o,h,l,c,v}], "page": N, "hasMore": bool}``
    500 -> ``{"status": "error", "message": "..."}``

Layer:
    adapters/schemas/http
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from tickerview.adapters.schemas.http.base import BaseHTTPSchema


class BarRecordHTTP(BaseHTTPSchema):
    """One bar in short-field wire form (``t`` in epoch milliseconds)."""

    t: int = Field(..., description="Bar open time, epoch milliseconds.")
    o: float = Field(..., description="Open price.")
    h: float = Field(..., description="High price.")
    l: float = Field(..., description="Low price.")  # noqa: E741
    c: float = Field(..., description="Close price.")
    v: float = Field(..., ge=0, description="Volume.")


class StockDataEnvelope(BaseHTTPSchema):
    """Successful page envelope."""

    status: Literal["success"] = "success"
    data: list[BarRecordHTTP]
    page: int = Field(..., ge=1)
    has_more: bool = Field(..., alias="hasMore")


class StockDataErrorEnvelope(BaseHTTPSchema):
    """Failure envelope."""

    status: Literal["error"] = "error"
    message: str
