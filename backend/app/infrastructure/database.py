"""Database Session Manager - async connection pool, rollback on failure, health checks.

Invariants:
    - Every session rolls back on exception (no partial commits leak)
    - SQLAlchemy exceptions surface as DatabaseError (core/errors.py), never raw
    - ApiError raised inside a session passes through untouched after rollback
    - Pool sizing comes from settings (DATABASE_POOL_SIZE / DATABASE_MAX_OVERFLOW)

Design Decisions:
    - Singleton db_manager initialized in the FastAPI lifespan, disposed on shutdown
    - expire_on_commit=False: prevents lazy-load issues in async context
    - SQLite URLs skip pool sizing: the test/dev driver uses a static pool
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.errors import ApiError, DatabaseError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIError subclasses
_ERROR_OPERATIONS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "commit", "Integrity constraint violated"),
    (OperationalError, "execute", "Connection or operational error"),
    (DBAPIError, "query", "Database driver error"),
    (SQLAlchemyError, "operation", "Database operation failed"),
)


def _to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    for error_type, operation, reason in _ERROR_OPERATIONS:
        if isinstance(exc, error_type):
            return DatabaseError(reason, operation)
    return DatabaseError(str(exc), "operation")


class DatabaseSessionManager:
    """Owns the async engine and hands out sessions with rollback semantics."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_options: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_options.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = _to_database_error(e)
            logger.error(
                f"DB {error.operation} error: {e}", extra={"error_code": error.code},
            )
            raise error from e
        except ApiError:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except DatabaseError as e:
            logger.error(f"DB health check failed: {e.reason}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def close_db() -> None:
    global db_manager
    if db_manager is not None:
        await db_manager.dispose()
        db_manager = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
