"""User Repository - SQLAlchemy implementation of the UserRepository protocol.

Invariants:
    - Each mutating call commits; failures propagate as SQLAlchemyError and are
      mapped to DatabaseError by DatabaseSessionManager
    - create() turns a unique-email violation into ConflictError (the only
      constraint a racing insert can break)
"""

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError
from app.models.user import User, UserRole


class SqlAlchemyUserRepository:

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, user_id: UUID) -> User | None:
        return await self._db.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        return await self._db.scalar(select(User).where(User.email == email))

    async def list(self, limit: int, offset: int) -> Sequence[User]:
        result = await self._db.execute(
            select(User).order_by(User.created_at.desc()).limit(limit).offset(offset),
        )
        return result.scalars().all()

    async def count(self) -> int:
        return await self._db.scalar(select(func.count()).select_from(User)) or 0

    async def create(
        self, *, email: str, name: str, password_hash: str,
        role: str = UserRole.USER.value,
    ) -> User:
        user = User(
            email=email, name=name, password_hash=password_hash,
            role=role, is_active=True,
        )
        self._db.add(user)
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise ConflictError("User", "Email already registered") from e
        await self._db.refresh(user)
        return user

    async def save(self, user: User) -> User:
        await self._db.commit()
        await self._db.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        await self._db.delete(user)
        await self._db.commit()

    async def deactivate_dormant(self, last_seen_before: datetime) -> int:
        """Deactivate active users not seen since the cutoff. Returns rows changed."""
        result = await self._db.execute(
            update(User)
            .where(User.is_active.is_(True))
            .where(or_(
                User.last_login_at < last_seen_before,
                (User.last_login_at.is_(None)) & (User.created_at < last_seen_before),
            ))
            .values(is_active=False),
        )
        await self._db.commit()
        return result.rowcount or 0
