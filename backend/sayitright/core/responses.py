import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sayitright.core.errors import AppError, ErrorCode, code_for_status

logger = logging.getLogger(__name__)

_MISSING = object()


def ok(data: Any = _MISSING) -> dict:
    """
    Wrap a payload in the success envelope.

    Args:
        data: Response payload; omitted for bodiless successes

    Returns:
        ``{"ok": True, "data": data}`` or ``{"ok": True}``
    """
    if data is _MISSING:
        return {"ok": True}
    if isinstance(data, dict) and data.get("ok") is True and "data" in data:
        return data
    return {"ok": True, "data": data}


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
) -> JSONResponse:
    """
    Build the error envelope.

    Args:
        status_code: HTTP status code
        code: Error code from ``ErrorCode``
        message: Client-facing message
        details: Extra structured information (validation errors etc.)

    Returns:
        JSONResponse with ``{"ok": False, "error": {...}}``
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "ok": False,
            "error": {"code": code, "message": message, "details": details},
        },
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code == status.HTTP_400_BAD_REQUEST:
        logger.warning(f"[{request.method}] {request.url.path} - 400 Bad Request: {exc.message}")
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Error"
    details = None if isinstance(exc.detail, str) else exc.detail
    response = error_response(
        exc.status_code,
        code_for_status(exc.status_code),
        message,
        details,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    logger.warning(f"[{request.method}] {request.url.path} - 400 Bad Request: {details}")
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorCode.BAD_REQUEST,
        "Bad Request",
        details,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"[{request.method}] {request.url.path} - unhandled error",
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_SERVER_ERROR,
        "Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing exception handlers"""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
