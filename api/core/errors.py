"""
Generic handlers for data-store failures.

Services never catch asyncpg errors; they bubble up to these handlers, which
log them and answer with a short, stable error body.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


async def unique_violation_handler(request: Request, exc: asyncpg.UniqueViolationError) -> JSONResponse:
    logger.warning(
        "unique_violation method=%s path=%s constraint=%s",
        request.method,
        request.url.path,
        getattr(exc, "constraint_name", None),
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Resource already exists."},
    )


async def store_failure_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("store_failure method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error."},
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette picks the most specific class in the MRO, so the unique
    # violation handler wins over the generic PostgresError one.
    app.add_exception_handler(asyncpg.UniqueViolationError, unique_violation_handler)
    app.add_exception_handler(asyncpg.PostgresError, store_failure_handler)
    app.add_exception_handler(asyncpg.InterfaceError, store_failure_handler)
