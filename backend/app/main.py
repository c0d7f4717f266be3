"""Posts API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Middleware order, outermost first: RequestLogging, OriginPolicy, JSONContentType, Recovery
    - Global error handlers map PostsApiError -> {"error", "description"} JSON responses
    - The store is opened on startup and closed on shutdown via the lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - create_app() factory: tests build apps with their own settings; `app` is the
      instance uvicorn serves
    - add_middleware() wraps the current stack, so stages are added innermost first
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.error_handlers import register_error_handlers
from app.api.middleware import (
    JSONContentTypeMiddleware, OriginPolicyMiddleware,
    RecoveryMiddleware, RequestLoggingMiddleware,
)
from app.api.routes import health, posts
from app.config import Settings, get_settings
from app.infrastructure.observability import setup_logging
from app.infrastructure.store_factory import open_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    if getattr(app.state, "store", None) is None:
        app.state.store = await open_store(settings)
    logger.info("Posts API started")
    yield
    logger.info("Posts API shutting down")
    close = getattr(app.state.store, "close", None)
    if close is not None:
        await close()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Posts API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = None

    # Innermost first
    app.add_middleware(RecoveryMiddleware)
    app.add_middleware(JSONContentTypeMiddleware)
    app.add_middleware(
        OriginPolicyMiddleware,
        allowed_origins=settings.cors_origins,
        allowed_methods=settings.cors_methods,
        allowed_headers=settings.cors_headers,
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router)
    app.include_router(posts.router)

    register_error_handlers(app)
    return app


app = create_app()
