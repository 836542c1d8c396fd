"""Exception handlers rendering every failure as ``{"error": message}``."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.errors import RewatchError

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def rewatch_exception_handler(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, RewatchError):
        raise exc
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info(
            "%s %s rejected (%s): %s", request.method, request.url.path, exc.kind.value, exc.message
        )
    return _error(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, StarletteHTTPException):
        raise exc
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error(exc.status_code, detail)


async def validation_exception_handler(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, RequestValidationError):
        raise exc
    errors = exc.errors()
    logger.info("Request validation failed path=%s errors=%s", request.url.path, errors)
    message = "Invalid request body"
    if errors:
        first = errors[0]
        field = ".".join(str(loc) for loc in first.get("loc", ()) if loc != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg") or message)
    return _error(status.HTTP_400_BAD_REQUEST, message)


async def global_exception_handler(request: Request, exc: Exception) -> Response:
    """Catch-all: log with traceback, never leak details."""
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RewatchError, rewatch_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
