"""Error Handlers — global exception handlers for the Posts API.

Invariants:
    - PostsApiError -> its http_status with {"error": <status phrase>, "description": <message>}
    - RequestValidationError (malformed JSON, wrong field types) -> 400, same envelope
    - HTTPException (unknown route, wrong method) -> same envelope
    - Anything else is left to RecoveryMiddleware (generic 500)

Design Decisions:
    - Three registered handlers: domain (PostsApiError), validation (Pydantic), HTTP
    - No catch-all Exception handler here: Starlette runs those outside user middleware,
      the recovery stage must sit inside the pipeline
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import ErrorSeverity, PostsApiError, error_body

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_posts_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)


def _register_posts_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(PostsApiError)
    async def posts_error_handler(request: Request, exc: PostsApiError):
        """Handle all Posts API domain/infrastructure errors."""
        log = logger.error if exc.severity is ErrorSeverity.CRITICAL else logger.info
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                status.HTTP_400_BAD_REQUEST, _describe_validation_errors(exc),
            ),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register HTTPException handler (routing-level 404/405)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one description line."""
    parts = []
    for e in exc.errors():
        location = ".".join(str(loc) for loc in e["loc"] if loc != "body")
        parts.append(f"{location or 'body'}: {e['msg']}")
    return "invalid request body: " + "; ".join(parts)
