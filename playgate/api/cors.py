"""
CORS preflight handling shared by every endpoint.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

ALLOWED_METHODS = "POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"
PREFLIGHT_MAX_AGE = "3600"


class CorsPreflightMiddleware(BaseHTTPMiddleware):
    """Answer OPTIONS with 204 and the allowed methods/headers; tag other responses."""

    def __init__(self, app: ASGIApp, allow_origin: str = "*") -> None:
        super().__init__(app)
        self.allow_origin = allow_origin

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(
                status_code=status.HTTP_204_NO_CONTENT,
                headers={
                    "Access-Control-Allow-Origin": self.allow_origin,
                    "Access-Control-Allow-Methods": ALLOWED_METHODS,
                    "Access-Control-Allow-Headers": ALLOWED_HEADERS,
                    "Access-Control-Max-Age": PREFLIGHT_MAX_AGE,
                },
            )

        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = self.allow_origin
        return response
