"""Request Pipeline - ordered middleware stages evaluated by an explicit driver loop.

Invariants:
    - Stage order is fixed: correlation -> logging -> sanitization -> validation -> dispatch
    - Every stage returns CONTINUE or Terminate(envelope); raised errors end the chain
      through the terminal error path
    - run() yields at most one envelope; None means downstream already responded
    - Timeout: exactly one of {downstream response, timeout envelope} reaches the client.
      On expiry the context is closed; the downstream task keeps running but its
      outcome is discarded

Design Decisions:
    - Tagged results + driver loop over nested call_next: control flow is a list, not
      an unwinding stack
    - Downstream is not cancelled on timeout: in-flight DB/queue calls are left to finish
      (no guaranteed preemption), their sends are dropped by the closed context
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from app.core.error_registry import ErrorRegistry
from app.core.errors import (
    PayloadTooLargeError, RequestTimeoutError, UnsupportedMediaTypeError, ValidationError,
)
from app.core.request_context import (
    RequestContext, RequestPhase, correlation_id_var, new_correlation_id,
)
from app.core.sanitize import NestingTooDeepError, sanitize_payload
from app.resources.envelope import Envelope, error_envelope

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class _Continue:
    def __repr__(self) -> str:
        return "CONTINUE"


CONTINUE = _Continue()


@dataclass(frozen=True)
class Terminate:
    envelope: Envelope


StageResult = _Continue | Terminate
Stage = Callable[[RequestContext], Awaitable[StageResult]]
Dispatch = Callable[[RequestContext], Awaitable[None]]

# Downstream tasks abandoned by a timeout; held so they are not garbage-collected mid-flight
_orphaned: set[asyncio.Task] = set()


# ─── Stages ──────────────────────────────────────────────────────

async def assign_correlation_id(ctx: RequestContext) -> StageResult:
    ctx.correlation_id = new_correlation_id()
    correlation_id_var.set(ctx.correlation_id)
    ctx.advance(RequestPhase.CORRELATION_ASSIGNED)
    return CONTINUE


async def log_request(ctx: RequestContext) -> StageResult:
    logger.info(
        f"{ctx.method} {ctx.path} received",
        extra={
            "correlation_id": ctx.correlation_id,
            "method": ctx.method,
            "path": ctx.path,
        },
    )
    ctx.advance(RequestPhase.LOGGED)
    return CONTINUE


def make_sanitize_body(max_body_bytes: int) -> Stage:
    """Decode a JSON body, clean it and re-encode it for downstream.

    Over-limit bodies are never decoded; validation rejects them with 413.
    """

    async def sanitize_body(ctx: RequestContext) -> StageResult:
        ctx.body = ctx.raw_body
        if len(ctx.raw_body) > max_body_bytes:
            ctx.body_too_large = True
        if (
            ctx.raw_body and not ctx.body_too_large
            and ctx.content_type == "application/json"
        ):
            _decode_json_body(ctx)
        ctx.advance(RequestPhase.SANITIZED)
        return CONTINUE

    return sanitize_body


def _decode_json_body(ctx: RequestContext) -> None:
    try:
        decoded = json.loads(ctx.raw_body)
    except (ValueError, RecursionError):
        ctx.body_error = "Malformed JSON body"
        return
    try:
        ctx.json_body = sanitize_payload(decoded)
    except NestingTooDeepError as e:
        ctx.body_error = str(e)
        return
    ctx.body = json.dumps(ctx.json_body, ensure_ascii=False).encode("utf-8")


def make_validate_body(max_body_bytes: int) -> Stage:
    """Structural checks that hold for every route, before any handler runs."""

    async def validate_body(ctx: RequestContext) -> StageResult:
        if ctx.body_too_large or len(ctx.raw_body) > max_body_bytes:
            raise PayloadTooLargeError(max_body_bytes)
        if ctx.raw_body and ctx.method in BODY_METHODS:
            if ctx.content_type != "application/json":
                raise UnsupportedMediaTypeError(ctx.content_type or "none")
        if ctx.body_error:
            raise ValidationError({"body": [ctx.body_error]})
        ctx.advance(RequestPhase.VALIDATED)
        return CONTINUE

    return validate_body


def default_stages(max_body_bytes: int) -> list[Stage]:
    return [
        assign_correlation_id,
        log_request,
        make_sanitize_body(max_body_bytes),
        make_validate_body(max_body_bytes),
    ]


# ─── Driver ──────────────────────────────────────────────────────

def _retain_orphan(task: asyncio.Task) -> None:
    _orphaned.add(task)
    task.add_done_callback(_discard_orphan)


def _discard_orphan(task: asyncio.Task) -> None:
    _orphaned.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    logger.debug(
        "Discarded abandoned downstream result",
        extra={"error_code": type(exc).__name__ if exc else None},
    )


class RequestPipeline:
    """Runs the stage list, then the timeout-bounded dispatch, for one request."""

    def __init__(
        self,
        stages: Sequence[Stage],
        registry: ErrorRegistry,
        timeout_seconds: float,
    ):
        self._stages = tuple(stages)
        self._registry = registry
        self._timeout = timeout_seconds

    async def run(self, ctx: RequestContext, dispatch: Dispatch) -> Envelope | None:
        """Drive ctx through every stage. Returns the envelope to send, if any."""
        for stage in self._stages:
            try:
                result = await stage(ctx)
            except Exception as exc:
                return self.fail(ctx, exc)
            if isinstance(result, Terminate):
                ctx.advance(
                    RequestPhase.SUCCEEDED if result.envelope.success
                    else RequestPhase.FAILED,
                )
                return result.envelope

        try:
            await self._dispatch_with_deadline(ctx, dispatch)
        except Exception as exc:
            if ctx.response_started:
                logger.error(
                    f"Unhandled exception after response started on {ctx.path}: {exc}",
                    exc_info=True,
                    extra={"correlation_id": ctx.correlation_id},
                )
                ctx.advance(RequestPhase.FAILED)
                return None
            return self.fail(ctx, exc)
        ctx.advance(
            RequestPhase.FAILED if (ctx.status_code or 500) >= 400
            else RequestPhase.SUCCEEDED,
        )
        return None

    def fail(self, ctx: RequestContext, exc: BaseException) -> Envelope:
        """Terminal error path: registry lookup, then the error transformer."""
        rendered = self._registry.render(exc)
        if rendered.status >= 500:
            logger.error(
                f"Unhandled exception on {ctx.path}: {exc}",
                exc_info=exc,
                extra={"correlation_id": ctx.correlation_id, "error_code": rendered.code},
            )
        else:
            logger.warning(
                f"{rendered.code} on {ctx.path}: {rendered.message}",
                extra={"correlation_id": ctx.correlation_id, "error_code": rendered.code},
            )
        ctx.advance(RequestPhase.FAILED)
        return error_envelope(rendered, ctx)

    async def _dispatch_with_deadline(
        self, ctx: RequestContext, dispatch: Dispatch,
    ) -> None:
        ctx.advance(RequestPhase.DISPATCHED)
        task = asyncio.ensure_future(dispatch(ctx))
        try:
            done, _ = await asyncio.wait({task}, timeout=self._timeout)
        except asyncio.CancelledError:
            # Caller went away (client disconnect): keep the downstream task referenced
            ctx.closed = True
            _retain_orphan(task)
            raise
        if task in done:
            task.result()
            return
        if ctx.response_started:
            # Headers already out: the deadline no longer applies
            await task
            return
        ctx.mark_timed_out()
        _retain_orphan(task)
        raise RequestTimeoutError(int(self._timeout * 1000))
