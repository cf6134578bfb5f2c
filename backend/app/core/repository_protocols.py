"""Boundary Protocols - capability interfaces services are composed over.

Invariants:
    - Services depend on these Protocols, never on SQLAlchemy or Celery directly
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID


class UserLike(Protocol):
    """Structural contract for user objects crossing the service boundary.

    Keeps core free of ORM imports while giving type checkers real fields.
    """
    id: UUID
    email: str
    name: str
    password_hash: str
    role: str
    is_active: bool
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_admin(self) -> bool: ...


class UserRepository(Protocol):
    """Contract for user persistence - implemented by the ORM adapter."""
    async def get(self, user_id: UUID) -> UserLike | None: ...
    async def get_by_email(self, email: str) -> UserLike | None: ...
    async def list(self, limit: int, offset: int) -> Sequence[UserLike]: ...
    async def count(self) -> int: ...
    async def create(
        self, *, email: str, name: str, password_hash: str, role: str = "user",
    ) -> UserLike:
        """Insert a new active user. Raises ConflictError if the email is taken."""
        ...
    async def save(self, user: UserLike) -> UserLike: ...
    async def delete(self, user: UserLike) -> None: ...
    async def deactivate_dormant(self, last_seen_before: datetime) -> int: ...


class EventPublisher(Protocol):
    """Contract for publishing domain events to the message queue."""
    def publish(self, event: str, payload: dict[str, Any]) -> None: ...
