"""User Controller - delegates to UserService and shapes output with user_resource."""

from uuid import UUID

from app.core.repository_protocols import UserLike
from app.core.request_context import RequestContext
from app.resources.envelope import Envelope, success_envelope
from app.resources.user_resource import (
    deleted_user_resource, user_collection, user_resource,
)
from app.schemas.user import UserCreate, UserUpdate
from app.services.user_service import UserService


async def create_user(
    payload: UserCreate, service: UserService, ctx: RequestContext | None,
) -> Envelope:
    user = await service.register(payload)
    return success_envelope(user_resource(user), ctx, status=201)


async def list_users(
    limit: int, offset: int, service: UserService, ctx: RequestContext | None,
) -> Envelope:
    users, total = await service.list(limit, offset)
    return success_envelope(user_collection(users, total, limit, offset), ctx)


async def get_user(
    user_id: UUID, service: UserService, ctx: RequestContext | None,
) -> Envelope:
    return success_envelope(user_resource(await service.get(user_id)), ctx)


def show_current_user(user: UserLike, ctx: RequestContext | None) -> Envelope:
    return success_envelope(user_resource(user), ctx)


async def update_user(
    actor: UserLike,
    user_id: UUID,
    payload: UserUpdate,
    service: UserService,
    ctx: RequestContext | None,
) -> Envelope:
    user = await service.update(actor, user_id, payload)
    return success_envelope(user_resource(user), ctx)


async def delete_user(
    actor: UserLike, user_id: UUID, service: UserService, ctx: RequestContext | None,
) -> Envelope:
    await service.delete(actor, user_id)
    return success_envelope(deleted_user_resource(user_id), ctx)
