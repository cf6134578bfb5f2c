"""Health & Readiness Probes - liveness and readiness endpoints for orchestration.

Invariants:
    - GET /health/ always returns 200 if the process is up (liveness)
    - GET /health/ready returns 503 DATABASE_ERROR envelope if the DB is unreachable

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from the balancer
"""

from fastapi import APIRouter, Depends, Request

from app.api.dependencies import get_request_context
from app.api.responses import to_response
from app.core.errors import DatabaseError
from app.core.request_context import RequestContext
from app.infrastructure import database
from app.resources.envelope import success_envelope

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/")
async def health_check(
    request: Request, ctx: RequestContext | None = Depends(get_request_context),
):
    """Basic liveness probe."""
    settings = request.app.state.settings
    return to_response(success_envelope(
        {"status": "healthy", "service": settings.project_name, "version": settings.version},
        ctx,
    ))


@router.get("/ready")
async def readiness_check(ctx: RequestContext | None = Depends(get_request_context)):
    """Readiness probe - includes database connectivity."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        raise DatabaseError("database unavailable", "health check")
    return to_response(success_envelope(
        {"status": "ready", "checks": {"database": "healthy"}}, ctx,
    ))
