"""Middleware Pipeline — logging, origin policy, content-type check, fault recovery.

Invariants:
    - Order (outermost -> innermost): RequestLogging, OriginPolicy, JSONContentType, Recovery
    - Each stage is dispatch(request, call_next) -> Response; no state shared across requests
    - Short-circuiting stages (403, 415, preflight 200) never call the inner chain
    - Recovery is the only place an unexpected exception becomes a 500; its body is generic
    - A logging failure is reported and swallowed; it never changes the response

Design Decisions:
    - BaseHTTPMiddleware subclasses over decorators: one class per concern, configured
      through constructor kwargs in main.py
    - Own origin policy instead of Starlette's CORSMiddleware: disallowed origins get an
      explicit 403 JSON body rather than a response without CORS headers
    - Recovery innermost: a fault answered with 500 still flows through CORS headers
      and the response log line
"""

import logging
import time
from typing import Awaitable, Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.types import ASGIApp

from app.core.errors import error_body

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]

_REDACTED_HEADERS = frozenset({"authorization", "cookie"})
_BODY_PREVIEW_BYTES = 2048

INTERNAL_ERROR_DESCRIPTION = "A server error occurred. Please contact support."


def _loggable_headers(request: Request) -> dict[str, str]:
    return {
        name: ("***" if name.lower() in _REDACTED_HEADERS else value)
        for name, value in request.headers.items()
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request on the way in and its status/latency on the way out."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        start = time.perf_counter()
        await self._log_request(request)
        response = await call_next(request)
        self._log_response(request, response, start)
        return response

    async def _log_request(self, request: Request) -> None:
        try:
            body = await request.body()
            preview = body[:_BODY_PREVIEW_BYTES].decode("utf-8", errors="replace")
            logger.info(
                f"Request: {request.method} {request.url.path} "
                f"headers={_loggable_headers(request)} body={preview!r}",
                extra={"method": request.method, "path": request.url.path},
            )
        except Exception:
            logger.warning("Request logging failed", exc_info=True)

    def _log_response(self, request: Request, response: Response, start: float) -> None:
        try:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.info(
                f"Response: {request.method} {request.url.path} "
                f"status={response.status_code} time={elapsed_ms}ms",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                },
            )
        except Exception:
            logger.warning("Response logging failed", exc_info=True)


class OriginPolicyMiddleware(BaseHTTPMiddleware):
    """CORS: allow-listed origins get CORS headers, others get 403."""

    def __init__(
        self,
        app: ASGIApp,
        allowed_origins: Iterable[str],
        allowed_methods: Iterable[str],
        allowed_headers: Iterable[str],
    ):
        super().__init__(app)
        self._origins = frozenset(allowed_origins)
        self._methods = ", ".join(allowed_methods)
        self._headers = ", ".join(allowed_headers)

    def is_allowed(self, origin: str) -> bool:
        return "*" in self._origins or origin in self._origins

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        origin = request.headers.get("origin")
        if not origin:
            return await call_next(request)

        if not self.is_allowed(origin):
            logger.warning(
                f"Rejected origin {origin} on {request.method} {request.url.path}",
                extra={"origin": origin, "path": request.url.path},
            )
            return JSONResponse(
                status_code=403, content=error_body(403, "Origin not allowed"),
            )

        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = self._methods
        response.headers["Access-Control-Allow-Headers"] = self._headers
        return response


class JSONContentTypeMiddleware(BaseHTTPMiddleware):
    """POST and PUT bodies must be declared application/json."""

    checked_methods = frozenset({"POST", "PUT"})
    accepted_type = "application/json"

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        if request.method in self.checked_methods:
            content_type = request.headers.get("content-type", "")
            if self.accepted_type not in content_type:
                return JSONResponse(
                    status_code=415,
                    content=error_body(415, "Content-Type must be application/json"),
                )
        return await call_next(request)


class RecoveryMiddleware(BaseHTTPMiddleware):
    """Last line of defense: unexpected exceptions become a generic 500."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                f"Recovered from unhandled {type(exc).__name__}: "
                f"{request.method} {request.url.path} headers={_loggable_headers(request)}",
                exc_info=True,
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "error_code": "INTERNAL_ERROR",
                },
            )
            return self._internal_error_response()

    @staticmethod
    def _internal_error_response() -> Response:
        try:
            return JSONResponse(
                status_code=500, content=error_body(500, INTERNAL_ERROR_DESCRIPTION),
            )
        except Exception:
            logger.error("Failed to encode internal error response", exc_info=True)
            return PlainTextResponse("Internal Server Error", status_code=500)
