"""Exception handlers that render every failure as the same JSON shape.

``{"success": false, "error": <message>, "code": <ErrorCode>,
"request_id": ..., "timestamp": ...}``; validation failures add ``details``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from devboard.middleware.error_codes import ErrorCode, get_error_code
from devboard.services.exceptions import ScanTimeoutError, UserNotFoundError
from devboard.services.github.exceptions import GithubError, GithubRateLimitError

logger = logging.getLogger("devboard.exception")

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def error_response(
    request: Request,
    status_code: int,
    code: ErrorCode,
    message: str,
    details: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "success": False,
        "error": message,
        "code": code.value,
        "request_id": _request_id(request),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("HTTP %s on %s: %s", exc.status_code, request.url.path, exc.detail)
    return error_response(request, exc.status_code, get_error_code(exc.status_code), str(exc.detail))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Path/query validation failures, one detail entry per offending field."""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", [])),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorCode.VALIDATION_ERROR,
        "Invalid request parameters",
        details=details,
    )


async def user_not_found_handler(request: Request, exc: UserNotFoundError) -> JSONResponse:
    return error_response(request, status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND, str(exc))


async def scan_timeout_handler(request: Request, exc: ScanTimeoutError) -> JSONResponse:
    logger.warning("Scan for %s gave up after %ss", exc.username, exc.timeout)
    return error_response(request, status.HTTP_504_GATEWAY_TIMEOUT, ErrorCode.TIMEOUT, str(exc))


async def github_exception_handler(request: Request, exc: GithubError) -> JSONResponse:
    """A failure that prevents a scan result; the upstream message is passed on."""
    logger.error("GitHub failure on %s [%s]: %s", request.url.path, _request_id(request), exc)
    code = (
        ErrorCode.RATE_LIMITED
        if isinstance(exc, GithubRateLimitError)
        else ErrorCode.UPSTREAM_ERROR
    )
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, code, str(exc))


async def database_exception_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.error("Store failure on %s [%s]: %s", request.url.path, _request_id(request), exc)
    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.DATABASE_ERROR, str(exc)
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s [%s]", request.url.path, _request_id(request))
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_ERROR,
        UNEXPECTED_ERROR_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(UserNotFoundError, user_not_found_handler)
    app.add_exception_handler(ScanTimeoutError, scan_timeout_handler)
    app.add_exception_handler(GithubError, github_exception_handler)
    app.add_exception_handler(PyMongoError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
