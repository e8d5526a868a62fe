# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Liveness endpoint (`/healthz`).

The service holds no connections of its own, so liveness is the only signal;
provider reachability surfaces through `/stock-data` errors and metrics.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, status

from tickerview import __version__
from tickerview.adapters.schemas.http.base import BaseHTTPSchema

router = APIRouter(tags=["Health"])


class HealthResponse(BaseHTTPSchema):
    """Liveness payload."""

    status: Literal["ok"] = "ok"
    version: str


@router.get(
    "/healthz",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
)
async def healthz() -> HealthResponse:
    return HealthResponse(version=__version__)
