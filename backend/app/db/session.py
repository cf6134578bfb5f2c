"""Async Session Factory - DB sessions for code running outside a FastAPI request.

Invariants:
    - Meant for Celery tasks, scripts and migrations; requests use get_db
    - Caller owns the returned engine and disposes it when done

Design Decisions:
    - Separate from infrastructure/database.py: workers run in their own event loop
      (asyncio.run per task) and must not share the API's pooled engine
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import NullPool


def create_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create a pool-less engine and session factory for one unit of work."""
    engine = create_async_engine(database_url, echo=False, poolclass=NullPool)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine, factory
