"""Conversion of service errors into HTTP responses with the standard envelope."""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from models.envelope import ApiErrorResponse
from services.errors import TaskFlowError
from services.object_ids import format_errors

logger = logging.getLogger(__name__)

_CODES_BY_STATUS = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHENTICATED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    500: "INTERNAL_ERROR",
}


def to_http_exception(error: TaskFlowError) -> HTTPException:
    """Map a service error onto an HTTPException carrying its code and message."""
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return HTTPException(
        status_code=error.status_code,
        detail={"error": error.code, "message": error.message},
        headers=headers,
    )


def _error_payload(detail: Any, status_code: int) -> dict:
    if isinstance(detail, dict):
        code = str(detail.get("error") or _CODES_BY_STATUS.get(status_code, f"HTTP_{status_code}"))
        message = str(detail.get("message") or "HTTP error")
    else:
        code = _CODES_BY_STATUS.get(status_code, f"HTTP_{status_code}")
        message = str(detail or "HTTP error")
    return ApiErrorResponse(message=message, error=code).model_dump()


def register_exception_handlers(app: FastAPI, expose_internal_errors: bool = True) -> None:
    """Render every failure as {success: false, message, error}."""

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("HTTP %s on %s %s", exc.status_code, request.method, request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_payload(exc.detail, exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Missing or malformed input is a user-correctable 400, not FastAPI's 422.
        return JSONResponse(
            status_code=400,
            content=ApiErrorResponse(
                message=format_errors(exc.errors()),
                error="VALIDATION_ERROR",
            ).model_dump(),
        )

    @app.exception_handler(TaskFlowError)
    async def handle_service_error(request: Request, exc: TaskFlowError) -> JSONResponse:
        http_exc = to_http_exception(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=_error_payload(http_exc.detail, http_exc.status_code),
            headers=http_exc.headers,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = "Internal server error"
        if expose_internal_errors and str(exc):
            message = f"Internal server error: {exc}"
        return JSONResponse(
            status_code=500,
            content=ApiErrorResponse(message=message, error="INTERNAL_ERROR").model_dump(),
        )
