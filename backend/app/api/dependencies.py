"""API Dependencies - FastAPI providers wiring services to their collaborators.

Invariants:
    - Services are built per request around the request's DB session
    - get_current_user raises UnauthorizedError, never returns None

Design Decisions:
    - Publisher is its own dependency so tests override it with a recording fake
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.core.repository_protocols import EventPublisher, UserLike
from app.core.request_context import RequestContext
from app.infrastructure.database import get_db
from app.infrastructure.user_repository import SqlAlchemyUserRepository
from app.services.auth_service import AuthService
from app.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_request_context(request: Request) -> RequestContext | None:
    return getattr(request.state, "context", None)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_event_publisher() -> EventPublisher:
    # Deferred: importing the Celery app reads broker settings
    from app.workers.celery_app import celery_app
    from app.workers.publisher import CeleryEventPublisher

    return CeleryEventPublisher(celery_app)


def get_user_service(
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> UserService:
    return UserService(SqlAlchemyUserRepository(db), publisher)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(
        SqlAlchemyUserRepository(db),
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_expires_minutes,
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> UserLike:
    token = credentials.credentials if credentials else None
    return await auth.authenticate(token)
