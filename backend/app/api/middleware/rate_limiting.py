"""Rate limiting - per-client request quota via slowapi.

Invariants:
    - Quota and window come from settings (RATE_LIMIT_MAX per RATE_LIMIT_WINDOW_SECONDS)
    - Exceeding the quota renders a RATE_LIMITED envelope, same shape as every other error

Design Decisions:
    - Limiter built per application (build_limiter) so tests get a fresh in-memory store
    - Handler is sync: SlowAPIMiddleware calls it directly without awaiting
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import Settings
from app.api.error_handlers import error_response
from app.core.errors import RateLimitError


def build_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
    )


def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded,
) -> JSONResponse:
    """Translate slowapi's exception into the error envelope."""
    return error_response(request, RateLimitError(str(exc.detail)))
