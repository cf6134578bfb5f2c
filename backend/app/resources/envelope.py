"""Response Envelope - canonical wrapper for every HTTP response body.

Invariants:
    - Exactly one of data / error is populated (success -> data, failure -> error);
      a success without data is rejected at construction
    - Envelope is frozen; transformers never mutate their inputs
    - meta.timestamp is the request's received-at time, so rendering the same
      error twice for one request gives byte-identical JSON
    - error.details is omitted when the error carries none

Design Decisions:
    - Transformers take the RequestContext rather than reading globals: pure and testable
    - to_dict() builds fresh containers each call (details tuples become lists)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from app.core.error_registry import RenderedError
from app.core.request_context import RequestContext


@dataclass(frozen=True)
class ResponseMeta:
    correlation_id: str | None
    timestamp: str

    def to_dict(self) -> dict:
        return {"correlationId": self.correlation_id, "timestamp": self.timestamp}


@dataclass(frozen=True)
class ErrorBody:
    code: str
    message: str
    details: Mapping[str, Any] | None = None

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = {
                key: list(value) if isinstance(value, tuple) else value
                for key, value in self.details.items()
            }
        return body


@dataclass(frozen=True)
class Envelope:
    success: bool
    meta: ResponseMeta
    data: Any = None
    error: ErrorBody | None = None
    status: int = 200

    def __post_init__(self):
        if self.success and (self.data is None or self.error is not None):
            raise ValueError("successful envelope needs data and no error")
        if not self.success and (self.error is None or self.data is not None):
            raise ValueError("failed envelope needs an error and no data")

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "data": self.data, "meta": self.meta.to_dict()}
        return {
            "success": False,
            "error": self.error.to_dict(),
            "meta": self.meta.to_dict(),
        }


def _meta(ctx: RequestContext | None) -> ResponseMeta:
    if ctx is None:
        return ResponseMeta(None, "")
    return ResponseMeta(ctx.correlation_id, ctx.timestamp)


def success_envelope(
    data: Any, ctx: RequestContext | None, status: int = 200,
) -> Envelope:
    return Envelope(success=True, meta=_meta(ctx), data=data, status=status)


def error_envelope(rendered: RenderedError, ctx: RequestContext | None) -> Envelope:
    return Envelope(
        success=False,
        meta=_meta(ctx),
        error=ErrorBody(rendered.code, rendered.message, rendered.details),
        status=rendered.status,
    )
