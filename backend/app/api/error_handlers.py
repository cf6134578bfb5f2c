"""Error Handlers - framework exceptions rendered through the error registry.

Invariants:
    - ApiError -> registry entry -> error envelope (status from the registry)
    - RequestValidationError -> ValidationError with per-field details, order kept
    - Starlette HTTPException 404 -> ROUTE_NOT_FOUND, other statuses -> HTTP kind
    - Anything else escapes to the pipeline middleware, which renders INTERNAL

Design Decisions:
    - One error_response() used by every handler: a single rendering path
    - Registry read from app.state so tests can install a fresh instance
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.error_registry import ErrorRegistry, error_registry
from app.core.errors import ApiError, HttpError, RouteNotFoundError, ValidationError
from app.resources.envelope import error_envelope

logger = logging.getLogger(__name__)


def _registry_for(request: Request) -> ErrorRegistry:
    return getattr(request.app.state, "error_registry", error_registry)


def error_response(
    request: Request, exc: ApiError, headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render exc for this request as an error envelope response."""
    ctx = getattr(request.state, "context", None)
    rendered = _registry_for(request).render(exc)
    level = logging.ERROR if rendered.status >= 500 else logging.WARNING
    logger.log(
        level,
        f"{rendered.code}: {rendered.message}",
        extra={
            "error_code": rendered.code,
            "path": request.url.path,
            "correlation_id": getattr(ctx, "correlation_id", None),
        },
    )
    envelope = error_envelope(rendered, ctx)
    return JSONResponse(
        status_code=envelope.status, content=envelope.to_dict(), headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_api_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)


def _register_api_error_handler(app: FastAPI) -> None:

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return error_response(request, exc)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors with field-level details."""
        return error_response(request, ValidationError.from_pydantic(exc.errors()))


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(
                request, RouteNotFoundError(request.method, request.url.path),
            )
        detail = exc.detail if isinstance(exc.detail, str) else None
        return error_response(
            request, HttpError(exc.status_code, detail), headers=exc.headers,
        )
