"""Auth Routes - token issuance."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_auth_service, get_request_context
from app.api.responses import to_response
from app.controllers import auth_controller
from app.core.request_context import RequestContext
from app.schemas.auth import LoginRequest
from app.services.auth_service import AuthService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login")
async def login(
    body: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    ctx: RequestContext | None = Depends(get_request_context),
):
    """Exchange email/password for a bearer token."""
    return to_response(await auth_controller.login(body, service, ctx))
