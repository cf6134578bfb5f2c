"""Request Context - per-request state threaded through the middleware chain.

Invariants:
    - One RequestContext per in-flight request, discarded after the response is sent
    - correlation_id is assigned exactly once, before any log line for the request
    - Phases only move forward: RECEIVED -> ... -> RESPONSE_SENT
    - Once closed, nothing more may be sent for this request

Design Decisions:
    - Plain mutable dataclass owned by one request: no locks, nothing shared
    - ContextVar mirrors the correlation id so log records pick it up without plumbing
"""

import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


class RequestPhase(IntEnum):
    """Request lifecycle; ordering of values is the ordering of phases."""
    RECEIVED = 0
    CORRELATION_ASSIGNED = 1
    LOGGED = 2
    SANITIZED = 3
    VALIDATED = 4
    DISPATCHED = 5
    SUCCEEDED = 6
    FAILED = 7
    RESPONSE_SENT = 8


def new_correlation_id() -> str:
    return str(uuid.uuid4())


@dataclass
class RequestContext:
    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    raw_body: bytes = b""
    body: bytes = b""
    json_body: Any = None
    body_error: str | None = None
    body_too_large: bool = False
    correlation_id: str | None = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started: float = field(default_factory=time.monotonic)
    phase: RequestPhase = RequestPhase.RECEIVED
    status_code: int | None = None
    response_started: bool = False
    timed_out: bool = False
    closed: bool = False

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "").split(";")[0].strip().lower()

    @property
    def timestamp(self) -> str:
        return self.received_at.isoformat()

    @property
    def duration_ms(self) -> float:
        return round((time.monotonic() - self.started) * 1000, 2)

    def advance(self, phase: RequestPhase) -> None:
        if phase < self.phase:
            raise ValueError(f"cannot move from {self.phase.name} back to {phase.name}")
        self.phase = phase

    def mark_timed_out(self) -> None:
        self.timed_out = True
        self.closed = True
