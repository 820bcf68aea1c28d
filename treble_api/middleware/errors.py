"""
Treble API — Unhandled Error Middleware
========================================

What:  Turns exceptions that no registered handler converted into the
       generic 500 body.
Why:   Starlette runs an `Exception` handler in ServerErrorMiddleware,
       outside every user middleware, so those 500s would leave without
       CORS headers or X-Request-ID and a browser could not read them.
How:   Added first, so it sits innermost (just outside the routes) and its
       response still flows back through CORS, GZip, logging and request ID.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from treble_api.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


def server_error_response() -> JSONResponse:
    """Generic 500 body; internals stay in the log."""
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "Server error",
            "request_id": request_id_var.get(""),
        },
    )


class UnhandledErrorMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                request_id_var.get(""), request.method, request.url.path, str(e),
                exc_info=True,
            )
            return server_error_response()
