"""Request body size limit"""

from typing import Callable

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from sayitright.core.errors import ErrorCode, PayloadTooLargeError
from sayitright.core.responses import error_response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose Content-Length exceeds ``max_size``"""

    def __init__(self, app, max_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")

        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                return error_response(
                    status.HTTP_400_BAD_REQUEST,
                    ErrorCode.BAD_REQUEST,
                    "Invalid Content-Length header",
                )
            if size > self.max_size:
                # Middleware runs outside the exception handlers
                exc = PayloadTooLargeError(
                    f"Request body too large. Maximum: {self.max_size / 1024 / 1024:.1f}MB"
                )
                return error_response(exc.status_code, exc.code, exc.message)

        return await call_next(request)
