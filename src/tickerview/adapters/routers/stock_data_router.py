# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Stock Data Router.

Synopsis:
    Same-origin proxy for one page of historical daily bars:
    ``GET /stock-data?symbol=&page=``. Keeps the provider API key server-side.

Design:
    * Presentation-only: validates query params, delegates to the bar
      gateway, shapes the response via the presenter.
    * Any gateway failure becomes HTTP 500 with a fixed public message; the
      detail is logged, not returned.

Layer:
    adapters/routers
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from tickerview.adapters.presenters.stock_data_presenter import (
    PUBLIC_FAILURE_MESSAGE,
    present_error,
    present_page,
)
from tickerview.adapters.schemas.http.stock_data import (
    StockDataEnvelope,
    StockDataErrorEnvelope,
)
from tickerview.application.interfaces.bar_gateway import BarGateway
from tickerview.dependencies.market_data import get_bar_gateway
from tickerview.domain.entities.bar import FetchError
from tickerview.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

router = APIRouter(tags=["Market Data"])


@router.get(
    "/stock-data",
    response_model=StockDataEnvelope,
    status_code=status.HTTP_200_OK,
    responses={500: {"model": StockDataErrorEnvelope}},
    summary="Get one page of historical daily bars",
    description=(
        "Returns up to one provider page of daily OHLCV bars for the symbol, "
        "ascending by time, covering the configured look-back window."
    ),
)
async def get_stock_data(
    gateway: Annotated[BarGateway, Depends(get_bar_gateway)],
    symbol: Annotated[
        str, Query(max_length=16, description="Ticker symbol")
    ] = "AAPL",
    page: Annotated[int, Query(ge=1, description="1-based page")] = 1,
) -> JSONResponse:
    """Return one page of bars or the error envelope."""
    normalized = symbol.strip().upper()
    if not normalized:
        return present_error("symbol must not be blank", http_status=400)

    result = await gateway.fetch(normalized, page)
    if isinstance(result, FetchError):
        logger.error(
            "stock_data_fetch_failed",
            extra={"extra": {"symbol": normalized, "page": page, "error": result.message}},
        )
        return present_error(PUBLIC_FAILURE_MESSAGE)

    logger.info(
        "stock_data_served",
        extra={
            "extra": {
                "symbol": normalized,
                "page": page,
                "count": len(result.bars),
                "has_more": result.has_more,
            }
        },
    )
    return present_page(result)
