# tickerview/infrastructure/http/errors.py
"""Exception handlers emitting the ``{"status": "error", "message": ...}`` envelope."""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.responses import Response

from tickerview.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def error_envelope(*, message: str, request_id: str | None = None) -> dict[str, str]:
    body = {"status": "error", "message": message}
    if request_id is not None:
        body["request_id"] = request_id
    return body


def _request_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    fields = ", ".join(".".join(str(p) for p in err.get("loc", ())) for err in exc.errors())
    payload = error_envelope(
        message=f"Request validation failed: {fields}" if fields else "Request validation failed",
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=422, content=payload)


async def handle_http_exception(request: Request, exc: HTTPException) -> Response:
    payload = error_envelope(
        message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)


async def handle_unhandled_exception(request: Request, exc: Exception) -> Response:
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={"extra": {"path": request.url.path}},
    )
    payload = error_envelope(
        message="Internal server error",
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=500, content=payload)
