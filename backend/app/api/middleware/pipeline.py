"""Pipeline Middleware - ASGI adapter running RequestPipeline around the application.

Invariants:
    - Outermost application middleware: every response passes through it
    - Every response carries the X-Correlation-ID header
    - At most one http.response.start per request reaches the server
    - Downstream sends after the context closes (timeout) are dropped
    - Downstream sees the sanitized body with a matching content-length
    - Bodies are buffered only up to MAX_REQUEST_SIZE_BYTES; a larger declared or
      streamed body is flagged and never decoded

Design Decisions:
    - Pure ASGI over BaseHTTPMiddleware: the timeout needs to own the send channel
    - RequestContext stored in scope["state"] so routes read it as request.state.context
"""

import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.pipeline import RequestPipeline
from app.core.request_context import RequestContext, RequestPhase, correlation_id_var
from app.resources.envelope import Envelope

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _declared_length(headers: dict[str, str]) -> int | None:
    try:
        return int(headers["content-length"])
    except (KeyError, ValueError):
        return None


async def _read_body(receive: Receive, limit: int) -> tuple[bytes, bool]:
    """Buffer the request body. Stops once more than limit bytes arrived.

    Returns (body, exceeded); the body is empty when exceeded.
    """
    chunks: list[bytes] = []
    total = 0
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunk = message.get("body", b"")
        total += len(chunk)
        if total > limit:
            return b"", True
        chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks), False


def _replay(body: bytes, receive: Receive) -> Receive:
    """Hand downstream the (sanitized) body once, then defer to the real channel."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


def _with_body_length(scope: Scope, body: bytes) -> Scope:
    headers = [
        (name, value) for name, value in scope.get("headers", [])
        if name.lower() != b"content-length"
    ]
    if body:
        headers.append((b"content-length", str(len(body)).encode("latin-1")))
    return {**scope, "headers": headers}


class RequestPipelineMiddleware:
    """Builds a RequestContext per HTTP request and drives it through the pipeline."""

    def __init__(self, app: ASGIApp, pipeline: RequestPipeline, max_body_bytes: int):
        self.app = app
        self.pipeline = pipeline
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        ctx = RequestContext(
            method=scope["method"],
            path=scope["path"],
            headers={
                name.decode("latin-1").lower(): value.decode("latin-1")
                for name, value in scope.get("headers", [])
            },
        )
        declared = _declared_length(ctx.headers)
        if declared is not None and declared > self.max_body_bytes:
            ctx.body_too_large = True
        else:
            ctx.raw_body, ctx.body_too_large = await _read_body(
                receive, self.max_body_bytes,
            )
        scope.setdefault("state", {})["context"] = ctx
        token = correlation_id_var.set(None)

        async def send_downstream(message: Message) -> None:
            if ctx.closed:
                return
            await self._forward(ctx, send, message)

        async def dispatch(ctx: RequestContext) -> None:
            await self.app(
                _with_body_length(scope, ctx.body),
                _replay(ctx.body, receive),
                send_downstream,
            )

        try:
            envelope = await self.pipeline.run(ctx, dispatch)
            if envelope is not None:
                await self._emit(ctx, scope, receive, send, envelope)
        finally:
            ctx.closed = True
            if ctx.response_started:
                ctx.advance(RequestPhase.RESPONSE_SENT)
            self._log_completion(ctx)
            correlation_id_var.reset(token)

    async def _forward(self, ctx: RequestContext, send: Send, message: Message) -> None:
        if message["type"] == "http.response.start":
            if ctx.response_started:
                logger.error(
                    "Second response start suppressed",
                    extra={"correlation_id": ctx.correlation_id, "path": ctx.path},
                )
                return
            ctx.response_started = True
            ctx.status_code = message["status"]
            headers = [
                (name, value) for name, value in message.get("headers", [])
                if name.lower() != CORRELATION_HEADER.lower().encode()
            ]
            headers.append((
                CORRELATION_HEADER.lower().encode("latin-1"),
                (ctx.correlation_id or "").encode("latin-1"),
            ))
            message = {**message, "headers": headers}
        await send(message)

    async def _emit(
        self,
        ctx: RequestContext,
        scope: Scope,
        receive: Receive,
        send: Send,
        envelope: Envelope,
    ) -> None:
        if ctx.response_started:
            logger.error(
                "Envelope dropped: response already started",
                extra={"correlation_id": ctx.correlation_id, "path": ctx.path},
            )
            return

        async def send_envelope(message: Message) -> None:
            await self._forward(ctx, send, message)

        response = JSONResponse(envelope.to_dict(), status_code=envelope.status)
        await response(scope, receive, send_envelope)

    def _log_completion(self, ctx: RequestContext) -> None:
        logger.info(
            f"{ctx.method} {ctx.path} completed {ctx.status_code}",
            extra={
                "correlation_id": ctx.correlation_id,
                "method": ctx.method,
                "path": ctx.path,
                "status_code": ctx.status_code,
                "duration_ms": ctx.duration_ms,
            },
        )
