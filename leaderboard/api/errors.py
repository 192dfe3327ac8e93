"""Exception handlers mapping the error taxonomy onto HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core import LeaderboardError, StoreError, Unavailable, get_request_id

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "request_id": get_request_id() or ""},
        headers=headers,
    )


async def leaderboard_error_handler(_: Request, exc: LeaderboardError) -> JSONResponse:
    if isinstance(exc, Unavailable):
        logger.warning("Store unavailable: %s", exc.code)
        return _error(exc.status_code, "Service unavailable", {"Retry-After": "1"})
    if isinstance(exc, StoreError):
        # do not leak internals
        return _error(exc.status_code, "Server error")
    return _error(exc.status_code, exc.message)


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed request: %s", exc.errors())
    return _error(400, "Invalid request body")


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LeaderboardError, leaderboard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)


__all__ = ["register_error_handlers"]
