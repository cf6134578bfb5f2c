"""Auth Controller - login delegates to AuthService and returns the token pair."""

from dataclasses import asdict

from app.core.request_context import RequestContext
from app.resources.envelope import Envelope, success_envelope
from app.schemas.auth import LoginRequest
from app.services.auth_service import AuthService


async def login(
    payload: LoginRequest, service: AuthService, ctx: RequestContext | None,
) -> Envelope:
    tokens = await service.login(payload.email, payload.password)
    return success_envelope(asdict(tokens), ctx)
