# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Presenter for the ``/stock-data`` endpoint.

Purpose:
    Shape gateway outcomes into the wire envelopes and JSON responses,
    keeping the router free of serialization detail.

Layer:
    adapters/presenters
"""

from __future__ import annotations

from fastapi import status
from fastapi.responses import JSONResponse

from tickerview.adapters.mappers.bar_mapper import bar_to_record
from tickerview.adapters.schemas.http.stock_data import (
    BarRecordHTTP,
    StockDataEnvelope,
    StockDataErrorEnvelope,
)
from tickerview.domain.entities.bar import Page

PUBLIC_FAILURE_MESSAGE = "Failed to fetch stock data"

# The endpoint is consumed cross-origin by browser charts.
_CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def present_page(page: Page) -> JSONResponse:
    """Return the 200 envelope for a fetched page."""
    envelope = StockDataEnvelope(
        data=[BarRecordHTTP(**bar_to_record(bar)) for bar in page.bars],
        page=page.page,
        hasMore=page.has_more,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=envelope.model_dump_http(),
        headers=_CORS_HEADERS,
    )


def present_error(message: str = PUBLIC_FAILURE_MESSAGE, *, http_status: int = 500) -> JSONResponse:
    """Return the error envelope with ``http_status``."""
    envelope = StockDataErrorEnvelope(message=message)
    return JSONResponse(
        status_code=http_status,
        content=envelope.model_dump_http(),
        headers=_CORS_HEADERS,
    )
