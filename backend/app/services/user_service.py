"""User Service - account business rules over the UserRepository protocol.

Invariants:
    - Email is unique: a duplicate registration raises ConflictError
    - Only the account owner or an admin may update or delete an account
    - Only admins may change is_active
    - A successful registration publishes 'users.registered' exactly once
    - Failures surface as typed ApiErrors, never as bare exceptions
"""

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from app.core.errors import ConflictError, ForbiddenError, ResourceNotFoundError
from app.core.repository_protocols import EventPublisher, UserLike, UserRepository
from app.schemas.user import UserCreate, UserUpdate
from app.services.auth_service import hash_password

USER_REGISTERED = "users.registered"
EMAIL_TAKEN = "Email already registered"


def _ensure_owner_or_admin(actor: UserLike, target_id: UUID, action: str) -> None:
    if actor.id != target_id and not actor.is_admin:
        raise ForbiddenError(action)


@dataclass
class UserService:
    repository: UserRepository
    publisher: EventPublisher

    async def register(self, data: UserCreate) -> UserLike:
        if await self.repository.get_by_email(data.email) is not None:
            raise ConflictError("User", EMAIL_TAKEN)
        # A concurrent registration can still win the insert; create() raises ConflictError
        user = await self.repository.create(
            email=data.email,
            name=data.name,
            password_hash=hash_password(data.password),
        )
        self.publisher.publish(
            USER_REGISTERED, {"user_id": str(user.id), "email": user.email},
        )
        return user

    async def get(self, user_id: UUID) -> UserLike:
        user = await self.repository.get(user_id)
        if user is None:
            raise ResourceNotFoundError("User", str(user_id))
        return user

    async def list(self, limit: int, offset: int) -> tuple[Sequence[UserLike], int]:
        users = await self.repository.list(limit, offset)
        return users, await self.repository.count()

    async def update(
        self, actor: UserLike, user_id: UUID, data: UserUpdate,
    ) -> UserLike:
        _ensure_owner_or_admin(actor, user_id, "update this user")
        if data.is_active is not None and not actor.is_admin:
            raise ForbiddenError("change account status")
        user = await self.get(user_id)
        if data.name is not None:
            user.name = data.name
        if data.password is not None:
            user.password_hash = hash_password(data.password)
        if data.is_active is not None:
            user.is_active = data.is_active
        return await self.repository.save(user)

    async def delete(self, actor: UserLike, user_id: UUID) -> None:
        _ensure_owner_or_admin(actor, user_id, "delete this user")
        user = await self.get(user_id)
        await self.repository.delete(user)
