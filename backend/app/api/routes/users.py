"""User Routes - account CRUD.

Invariants:
    - Registration (POST) is public; every other route needs a bearer token
    - Routes only adapt HTTP to controller calls: no business logic here
    - /me is declared before /{user_id} so it is not parsed as an id
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_current_user, get_request_context, get_user_service
from app.api.responses import to_response
from app.controllers import user_controller
from app.core.repository_protocols import UserLike
from app.core.request_context import RequestContext
from app.schemas.user import UserCreate, UserUpdate
from app.services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("", status_code=201)
async def create_user(
    body: UserCreate,
    service: UserService = Depends(get_user_service),
    ctx: RequestContext | None = Depends(get_request_context),
):
    return to_response(await user_controller.create_user(body, service, ctx))


@router.get("")
async def list_users(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    _user: UserLike = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    ctx: RequestContext | None = Depends(get_request_context),
):
    return to_response(await user_controller.list_users(limit, offset, service, ctx))


@router.get("/me")
async def get_me(
    user: UserLike = Depends(get_current_user),
    ctx: RequestContext | None = Depends(get_request_context),
):
    return to_response(user_controller.show_current_user(user, ctx))


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    _user: UserLike = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    ctx: RequestContext | None = Depends(get_request_context),
):
    return to_response(await user_controller.get_user(user_id, service, ctx))


@router.patch("/{user_id}")
async def update_user(
    user_id: UUID,
    body: UserUpdate,
    user: UserLike = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    ctx: RequestContext | None = Depends(get_request_context),
):
    return to_response(
        await user_controller.update_user(user, user_id, body, service, ctx),
    )


@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    user: UserLike = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    ctx: RequestContext | None = Depends(get_request_context),
):
    return to_response(await user_controller.delete_user(user, user_id, service, ctx))
