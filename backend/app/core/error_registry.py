"""Error Registry - static lookup from error kind to its HTTP rendering rule.

Invariants:
    - Built once at startup; the entry mapping is read-only afterwards
    - render() never raises: unknown exceptions and renderer failures fall back to INTERNAL
    - Rendered status is always within [400, 599]
    - Same exception instance -> equal RenderedError on every call

Design Decisions:
    - Explicit dict of kind -> entry: every mapping visible in one place, no MRO magic
    - Tests build a fresh registry instead of mutating the process-wide one
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from app.core.errors import ApiError, ErrorKind

logger = logging.getLogger(__name__)

INTERNAL_MESSAGE = "An unexpected error occurred"


@dataclass(frozen=True)
class RenderedError:
    """Deterministic HTTP rendering of one exception."""
    status: int
    code: str
    message: str
    details: Mapping[str, Any] | None = None


Renderer = Callable[["RegistryEntry", ApiError], RenderedError]


def render_fixed(entry: "RegistryEntry", exc: ApiError) -> RenderedError:
    """Status and code from the entry, message and details from the exception."""
    return RenderedError(entry.status, entry.code, exc.message, exc.details)


def render_own_status(entry: "RegistryEntry", exc: ApiError) -> RenderedError:
    """Status and code carried by the exception itself (HTTP and domain kinds)."""
    return RenderedError(exc.http_status, exc.code, exc.message, exc.details)


def render_opaque(entry: "RegistryEntry", exc: ApiError) -> RenderedError:
    """Never expose the exception's own text; it may carry internals."""
    return RenderedError(entry.status, entry.code, INTERNAL_MESSAGE)


@dataclass(frozen=True)
class RegistryEntry:
    status: int
    code: str
    renderer: Renderer = render_fixed


_FALLBACK = RegistryEntry(500, "INTERNAL_ERROR", render_opaque)
_FALLBACK_RENDERED = RenderedError(500, "INTERNAL_ERROR", INTERNAL_MESSAGE)


class ErrorRegistry:
    """Read-only mapping from ErrorKind to RegistryEntry."""

    def __init__(self, entries: Mapping[ErrorKind, RegistryEntry]):
        self._entries = MappingProxyType(dict(entries))

    @property
    def entries(self) -> Mapping[ErrorKind, RegistryEntry]:
        return self._entries

    def entry_for(self, kind: ErrorKind) -> RegistryEntry:
        return self._entries.get(kind, _FALLBACK)

    def render(self, exc: BaseException) -> RenderedError:
        """Render any exception. Non-ApiError exceptions become INTERNAL."""
        if not isinstance(exc, ApiError):
            return _FALLBACK_RENDERED
        entry = self.entry_for(exc.kind)
        try:
            rendered = entry.renderer(entry, exc)
        except Exception:
            logger.exception(
                "Error renderer failed", extra={"error_code": entry.code},
            )
            return _FALLBACK_RENDERED
        if not 400 <= rendered.status <= 599:
            logger.warning(
                f"Rendered status {rendered.status} out of range, using 500",
                extra={"error_code": rendered.code},
            )
            return _FALLBACK_RENDERED
        return rendered


def build_default_registry() -> ErrorRegistry:
    """Registry for every kind in the taxonomy."""
    return ErrorRegistry({
        ErrorKind.VALIDATION: RegistryEntry(400, "VALIDATION_ERROR"),
        ErrorKind.UNAUTHORIZED: RegistryEntry(401, "UNAUTHORIZED"),
        ErrorKind.FORBIDDEN: RegistryEntry(403, "FORBIDDEN"),
        ErrorKind.RESOURCE_NOT_FOUND: RegistryEntry(404, "RESOURCE_NOT_FOUND"),
        ErrorKind.ROUTE_NOT_FOUND: RegistryEntry(404, "ROUTE_NOT_FOUND"),
        ErrorKind.CONFLICT: RegistryEntry(409, "CONFLICT"),
        ErrorKind.TIMEOUT: RegistryEntry(408, "REQUEST_TIMEOUT"),
        ErrorKind.PAYLOAD_TOO_LARGE: RegistryEntry(413, "PAYLOAD_TOO_LARGE"),
        ErrorKind.UNSUPPORTED_MEDIA_TYPE: RegistryEntry(415, "UNSUPPORTED_MEDIA_TYPE"),
        ErrorKind.RATE_LIMITED: RegistryEntry(429, "RATE_LIMITED"),
        ErrorKind.HTTP: RegistryEntry(500, "HTTP_ERROR", render_own_status),
        ErrorKind.DOMAIN: RegistryEntry(422, "DOMAIN_ERROR", render_own_status),
        ErrorKind.DATABASE: RegistryEntry(503, "DATABASE_ERROR"),
        ErrorKind.INTERNAL: RegistryEntry(500, "INTERNAL_ERROR", render_opaque),
    })


# Process-wide registry (built once at import, never mutated)
error_registry = build_default_registry()
