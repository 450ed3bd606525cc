"""Exception listener: turns raised failures into HTTP responses."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from restwell.core.exceptions import HttpException
from restwell.core.exceptions import InternalServerErrorException
from restwell.core.exceptions import UnprocessableEntityException
from restwell.core.exceptions import exception_for_status

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "Request validation failed"
INTERNAL_ERROR_MESSAGE = "Internal server error"

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def render_exception(exc: HttpException) -> Response:
    """Build a fresh response and let ``exc`` prepare it."""
    response = Response()
    exc.prepare_response(response)
    return response


def _validation_errors(exc: RequestValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for issue in exc.errors():
        field = _format_location(issue.get("loc", ()))
        errors.setdefault(field, str(issue.get("msg", "Invalid value")))
    return errors


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    named = [part for part in location if part not in _LOCATION_PREFIXES]
    # A bare integer is a character offset (malformed JSON), not a field.
    if any(not isinstance(part, int) for part in named):
        return ".".join(str(part) for part in named)

    if not location:
        return "request"

    return str(location[0])


def _log_http_exception(request: Request, exc: HttpException) -> None:
    level = logging.WARNING if exc.status_code >= 500 else logging.INFO
    logger.log(level, "%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: HttpException) -> Response:
    """Render failures that know how to prepare their own response."""
    _log_http_exception(request, exc)
    return render_exception(exc)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> Response:
    """Report request schema violations as 422 with a field -> message map."""
    return await http_exception_handler(
        request,
        UnprocessableEntityException(VALIDATION_FAILED_MESSAGE, _validation_errors(exc)),
    )


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Route framework-raised HTTP errors (unknown route, wrong verb) through the same body."""
    if exc.status_code < 400:
        return Response(status_code=exc.status_code, headers=exc.headers)

    message = exc.detail if isinstance(exc.detail, str) and exc.detail else None
    errors = exc.detail if isinstance(exc.detail, (dict, list)) else None
    return await http_exception_handler(
        request,
        exception_for_status(exc.status_code, message, errors, headers=exc.headers),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Avoid leaking internal exceptions while keeping the body shape stable."""
    logger.exception("Unhandled exception for %s %s", request.method, request.url.path, exc_info=exc)
    return render_exception(InternalServerErrorException(INTERNAL_ERROR_MESSAGE))


def register_error_handlers(app: FastAPI) -> None:
    """Attach the exception listener to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)
    app.add_exception_handler(HttpException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
