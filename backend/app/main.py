"""Scaffold API - FastAPI application entry point.

Invariants:
    - Settings are loaded once when the app is created; bad config fails here, not later
    - Routes registered explicitly (no auto-discovery)
    - Request pipeline is the outermost application layer after security headers:
      every response carries X-Correlation-ID and the envelope shape
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - create_app(settings) factory: tests build apps with their own settings
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Middleware added inner-to-outer (Starlette wraps the last one added outermost)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.api.error_handlers import register_error_handlers
from app.api.middleware.pipeline import CORRELATION_HEADER, RequestPipelineMiddleware
from app.api.middleware.rate_limiting import build_limiter, rate_limit_exceeded_handler
from app.api.middleware.security_headers import SecurityHeadersMiddleware
from app.api.routes import auth, health, users
from app.config import Settings, get_settings
from app.core.error_registry import ErrorRegistry, error_registry
from app.core.pipeline import RequestPipeline, default_stages
from app.infrastructure.database import close_db, init_db
from app.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(f"{settings.project_name} started")
    yield
    await close_db()
    logger.info(f"{settings.project_name} shutting down")


def create_app(
    settings: Settings | None = None, registry: ErrorRegistry | None = None,
) -> FastAPI:
    """Composition root: settings, error handling, middleware chain, routes.

    One registry instance backs both the pipeline and the exception handlers.
    """
    settings = settings or get_settings()
    registry = registry or error_registry
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.error_registry = registry

    # Rate limiting
    app.state.limiter = build_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    register_error_handlers(app)

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        GZipMiddleware,
        minimum_size=settings.compression_threshold_bytes,
        compresslevel=settings.compression_level,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[CORRELATION_HEADER],
    )
    app.add_middleware(
        RequestPipelineMiddleware,
        pipeline=RequestPipeline(
            default_stages(settings.max_request_size_bytes),
            app.state.error_registry,
            settings.request_timeout_seconds,
        ),
        max_body_bytes=settings.max_request_size_bytes,
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    return app


app = create_app()
