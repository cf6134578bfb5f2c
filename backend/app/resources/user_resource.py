"""User Resource - public shape of a user; the password hash never leaves the service."""

from collections.abc import Sequence
from uuid import UUID

from app.core.repository_protocols import UserLike


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def user_resource(user: UserLike) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "isActive": user.is_active,
        "lastLoginAt": _iso(user.last_login_at),
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }


def user_collection(
    users: Sequence[UserLike], total: int, limit: int, offset: int,
) -> dict:
    return {
        "items": [user_resource(u) for u in users],
        "pagination": {"limit": limit, "offset": offset, "total": total},
    }


def deleted_user_resource(user_id: UUID) -> dict:
    return {"id": str(user_id), "deleted": True}
