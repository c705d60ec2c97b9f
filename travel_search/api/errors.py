"""Uniform error envelope.

Every failure leaves the API as::

    {"success": false,
     "error": {"code", "message", "timestamp", "path", "details"?}}
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from travel_search.config import Settings
from travel_search.search.errors import ApiError, RouteNotFoundError


logger = logging.getLogger(__name__)

_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    405: "METHOD_NOT_ALLOWED",
    429: "RATE_LIMITED",
}


_PARAM_SOURCES = ("query", "path", "header", "cookie", "body")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def validation_details(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Field-level error list: location relative to the parameter source, no input echo."""
    details = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in _PARAM_SOURCES:
            loc = loc[1:]
        details.append({"loc": loc, "msg": err.get("msg"), "type": err.get("type")})
    return details


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    error = {
        "code": code,
        "message": message,
        "timestamp": utc_timestamp(),
        "path": request.url.path,
    }
    if details is not None:
        error["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    def log_error(request: Request, exc: BaseException) -> None:
        if settings.is_production:
            # Summary only; no stack traces or payloads in production logs.
            logger.error(
                "Error occurred: %s",
                {
                    "path": request.url.path,
                    "method": request.method,
                    "timestamp": utc_timestamp(),
                    "errorType": type(exc).__name__,
                    "userAgent": request.headers.get("user-agent"),
                },
            )
        else:
            logger.error("Error on %s %s", request.method, request.url.path, exc_info=exc)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        log_error(request, exc)
        return error_response(request, exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        log_error(request, exc)
        return error_response(
            request, 400, "VALIDATION_ERROR", "Invalid request data", validation_details(exc.errors())
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            not_found = RouteNotFoundError()
            return error_response(request, 404, not_found.code, not_found.message)
        code = _STATUS_CODES.get(exc.status_code, "INTERNAL_ERROR" if exc.status_code >= 500 else "HTTP_ERROR")
        return error_response(request, exc.status_code, code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        log_error(request, exc)
        return error_response(request, 500, "INTERNAL_ERROR", "An unexpected error occurred")
