"""Celery Tasks - message-queue consumers and scheduled maintenance jobs.

Tasks:
    - users.registered: consumer for new-account events
    - maintenance.deactivate_dormant_users: cron job (schedule from settings)
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.exc import OperationalError

from app.config import get_settings
from app.db.session import create_session_factory
from app.infrastructure.user_repository import SqlAlchemyUserRepository
from app.workers.celery_app import celery_app
from app.workers.schedule import DORMANT_USERS_TASK

logger = logging.getLogger(__name__)


@celery_app.task(name="users.registered", acks_late=True)
def handle_user_registered(payload: dict[str, Any]) -> dict[str, Any]:
    """Consume a users.registered event.

    Placeholder side effect (welcome mail, CRM sync...) is a log line; the
    return value is kept in the result backend for inspection.
    """
    user_id = payload.get("user_id")
    if not user_id:
        raise ValueError("users.registered payload needs user_id")
    logger.info(
        f"Welcome flow started for user {user_id}",
        extra={"task_name": "users.registered", "event": "users.registered"},
    )
    return {"status": "ok", "user_id": user_id}


async def deactivate_dormant_users(database_url: str, dormant_days: int) -> int:
    cutoff = datetime.now(timezone.utc) - timedelta(days=dormant_days)
    engine, session_factory = create_session_factory(database_url)
    try:
        async with session_factory() as db:
            return await SqlAlchemyUserRepository(db).deactivate_dormant(cutoff)
    finally:
        await engine.dispose()


@celery_app.task(
    name=DORMANT_USERS_TASK,
    autoretry_for=(OperationalError,),
    max_retries=3,
    retry_backoff=True,
    retry_backoff_max=600,
)
def deactivate_dormant_users_task() -> dict[str, Any]:
    """Deactivate dormant users; connection-level DB failures are retried with backoff."""
    settings = get_settings()
    count = asyncio.run(
        deactivate_dormant_users(settings.database_url, settings.dormant_user_days),
    )
    logger.info(
        f"Deactivated {count} dormant user(s)",
        extra={"task_name": DORMANT_USERS_TASK},
    )
    return {"status": "ok", "deactivated": count}
