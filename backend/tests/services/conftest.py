"""Service test fixtures - in-memory fakes for the repository and publisher protocols."""

import uuid
from datetime import datetime, timezone

import pytest

from app.core.errors import ConflictError
from app.models.user import User, UserRole
from app.services.auth_service import hash_password

PASSWORD = "correct-horse-battery"


class InMemoryUserRepository:
    """UserRepository over a dict; enforces unique emails like the table does."""

    def __init__(self):
        self.users: dict[uuid.UUID, User] = {}
        self.saves = 0

    async def get(self, user_id):
        return self.users.get(user_id)

    async def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    async def list(self, limit, offset):
        ordered = sorted(self.users.values(), key=lambda u: u.created_at, reverse=True)
        return ordered[offset:offset + limit]

    async def count(self):
        return len(self.users)

    async def create(self, *, email, name, password_hash, role=UserRole.USER.value):
        if any(u.email == email for u in self.users.values()):
            raise ConflictError("User", "Email already registered")
        now = datetime.now(timezone.utc)
        user = User(
            id=uuid.uuid4(), email=email, name=name, password_hash=password_hash,
            role=role, is_active=True, created_at=now, updated_at=now,
        )
        self.users[user.id] = user
        return user

    async def save(self, user):
        self.saves += 1
        user.updated_at = datetime.now(timezone.utc)
        return user

    async def delete(self, user):
        self.users.pop(user.id, None)

    async def deactivate_dormant(self, last_seen_before):
        changed = 0
        for user in self.users.values():
            seen = user.last_login_at or user.created_at
            if user.is_active and seen < last_seen_before:
                user.is_active = False
                changed += 1
        return changed


class RecordingPublisher:
    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def publish(self, event, payload):
        self.events.append((event, payload))


@pytest.fixture
def repository():
    return InMemoryUserRepository()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def make_user(repository):
    async def _make(email="member@example.com", role=UserRole.USER, is_active=True):
        user = await repository.create(
            email=email,
            name=email.split("@")[0],
            password_hash=hash_password(PASSWORD),
            role=role.value,
        )
        user.is_active = is_active
        return user

    return _make


@pytest.fixture
def password():
    return PASSWORD
