"""Celery Event Publisher - EventPublisher implementation over send_task.

Invariants:
    - Events are published by task name; the API never imports task functions
    - A broker failure is logged and does not fail the request that caused the event

Design Decisions:
    - Best-effort publish: the database write already succeeded, the event is a side effect
"""

import logging
from typing import Any

from celery import Celery
from kombu.exceptions import KombuError

logger = logging.getLogger(__name__)


class CeleryEventPublisher:

    def __init__(self, app: Celery):
        self._app = app

    def publish(self, event: str, payload: dict[str, Any]) -> None:
        try:
            self._app.send_task(event, kwargs={"payload": payload})
        except (KombuError, OSError) as e:
            logger.error(
                f"Failed to publish {event}: {e}", extra={"event": event},
            )
            return
        logger.info(f"Published {event}", extra={"event": event})
