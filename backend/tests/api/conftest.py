"""API test fixtures - fresh app per test, in-memory SQLite, recording publisher.

Invariants:
    - Every test gets a fresh in-memory SQLite database and a fresh app
    - get_db and get_event_publisher overridden; nothing reaches Postgres or a broker
    - make_app(registry=None, **overrides) builds an app with patched settings
      (timeouts, limits) and optionally its own error registry
"""

import uuid
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.dependencies import get_event_publisher
from app.config import get_settings
from app.db.base import Base
from app.infrastructure.database import get_db
from app.main import create_app
from app.models.user import User, UserRole
from app.services.auth_service import hash_password

PASSWORD = "correct-horse-battery"


class RecordingPublisher:
    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def publish(self, event, payload):
        self.events.append((event, payload))


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def make_app(test_session_factory, publisher):
    def _make(registry=None, **overrides):
        settings = get_settings().model_copy(update=overrides)
        application = create_app(settings, registry=registry)

        async def override_get_db():
            async with test_session_factory() as session:
                yield session

        application.dependency_overrides[get_db] = override_get_db
        application.dependency_overrides[get_event_publisher] = lambda: publisher
        return application

    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


async def _seed_user(db, email: str, role: UserRole) -> User:
    now = datetime.now(timezone.utc)
    user = User(
        id=uuid.uuid4(),
        email=email,
        name=email.split("@")[0],
        password_hash=hash_password(PASSWORD),
        role=role.value,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def member(test_db):
    return await _seed_user(test_db, "member@example.com", UserRole.USER)


@pytest.fixture
async def admin(test_db):
    return await _seed_user(test_db, "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def login(client):
    """login(email) -> Authorization header dict for a seeded user."""

    async def _login(email: str) -> dict[str, str]:
        res = await client.post(
            "/api/v1/auth/login", json={"email": email, "password": PASSWORD},
        )
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['data']['access_token']}"}

    return _login
