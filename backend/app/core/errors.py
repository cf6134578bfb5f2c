"""Error Hierarchy - typed exceptions for every failure the request path can surface.

Invariants:
    - Every error has a kind (ErrorKind), http_status, code (str) and message
    - Public fields are immutable once constructed; details is a read-only mapping
    - Validation details map field name -> tuple of messages, insertion order kept
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ApiError base: the error registry renders all of them uniformly
    - Messages come from a per-class template so the same failure always reads the same
    - DomainError carries its own status/code: services add kinds without touching the registry
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any


class ErrorKind(str, Enum):
    """Error kinds known to the error registry."""
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    RESOURCE_NOT_FOUND = "resource_not_found"
    ROUTE_NOT_FOUND = "route_not_found"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    RATE_LIMITED = "rate_limited"
    HTTP = "http"
    DOMAIN = "domain"
    DATABASE = "database"
    INTERNAL = "internal"


_IMMUTABLE_FIELDS = frozenset({"kind", "http_status", "code", "message", "details"})


def _freeze_details(details: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if details is None:
        return None
    frozen = {}
    for key, value in details.items():
        if isinstance(value, (list, tuple)):
            value = tuple(value)
        frozen[str(key)] = value
    return MappingProxyType(frozen)


class ApiError(Exception):
    """Base exception for every failure rendered through the error registry."""

    kind: ErrorKind = ErrorKind.INTERNAL
    http_status: int = 500
    code: str = "INTERNAL_ERROR"
    message_template: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: Mapping[str, Any] | None = None,
        **template_args: Any,
    ):
        message = message or self.message_template.format(**template_args)
        super().__init__(message)
        # Pin class-level fields on the instance so the guard below covers them
        for name in ("kind", "http_status", "code"):
            self.__dict__.setdefault(name, getattr(type(self), name))
        self.message = message
        self.details = _freeze_details(details)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _IMMUTABLE_FIELDS and name in self.__dict__:
            raise AttributeError(f"{type(self).__name__}.{name} is immutable")
        super().__setattr__(name, value)


# ─── Client Errors (400-level) ──────────────────────────────────

class ValidationError(ApiError):
    """Request data failed validation; details map field -> messages."""
    kind = ErrorKind.VALIDATION
    http_status = 400
    code = "VALIDATION_ERROR"
    message_template = "Invalid request data"

    def __init__(
        self,
        fields: Mapping[str, Iterable[str]],
        message: str | None = None,
    ):
        super().__init__(
            message, {name: tuple(msgs) for name, msgs in fields.items()},
        )

    @classmethod
    def from_pydantic(cls, errors: Iterable[Mapping[str, Any]]) -> "ValidationError":
        """Group pydantic error dicts by field, keeping the order they arrived in."""
        fields: dict[str, list[str]] = {}
        for error in errors:
            loc = [str(part) for part in error.get("loc", ())]
            if len(loc) > 1 and loc[0] in ("body", "query", "path", "header"):
                loc = loc[1:]
            name = ".".join(loc) or "body"
            fields.setdefault(name, []).append(str(error.get("msg", "Invalid value")))
        return cls(fields)


class UnauthorizedError(ApiError):
    kind = ErrorKind.UNAUTHORIZED
    http_status = 401
    code = "UNAUTHORIZED"
    message_template = "Authentication required"


class ForbiddenError(ApiError):
    kind = ErrorKind.FORBIDDEN
    http_status = 403
    code = "FORBIDDEN"
    message_template = "You are not allowed to {action}"

    def __init__(self, action: str = "perform this action"):
        super().__init__(action=action)
        self.action = action


class ResourceNotFoundError(ApiError):
    """Requested resource does not exist."""
    kind = ErrorKind.RESOURCE_NOT_FOUND
    http_status = 404
    code = "RESOURCE_NOT_FOUND"
    message_template = "{resource_type} '{resource_id}' not found"

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(resource_type=resource_type, resource_id=resource_id)
        self.resource_type = resource_type
        self.resource_id = resource_id


class RouteNotFoundError(ApiError):
    """No route matches the request method and path."""
    kind = ErrorKind.ROUTE_NOT_FOUND
    http_status = 404
    code = "ROUTE_NOT_FOUND"
    message_template = "Route {method} {path} not found"

    def __init__(self, method: str, path: str):
        super().__init__(method=method, path=path)


class ConflictError(ApiError):
    kind = ErrorKind.CONFLICT
    http_status = 409
    code = "CONFLICT"
    message_template = "{resource_type} already exists"

    def __init__(self, resource_type: str, message: str | None = None):
        super().__init__(message, resource_type=resource_type)


class RequestTimeoutError(ApiError):
    """Downstream work did not finish before the request deadline."""
    kind = ErrorKind.TIMEOUT
    http_status = 408
    code = "REQUEST_TIMEOUT"
    message_template = "Request did not complete within {timeout_ms} ms"

    def __init__(self, timeout_ms: int):
        super().__init__(timeout_ms=timeout_ms)
        self.timeout_ms = timeout_ms


class PayloadTooLargeError(ApiError):
    kind = ErrorKind.PAYLOAD_TOO_LARGE
    http_status = 413
    code = "PAYLOAD_TOO_LARGE"
    message_template = "Request body exceeds {limit} bytes"

    def __init__(self, limit: int):
        super().__init__(limit=limit)


class UnsupportedMediaTypeError(ApiError):
    kind = ErrorKind.UNSUPPORTED_MEDIA_TYPE
    http_status = 415
    code = "UNSUPPORTED_MEDIA_TYPE"
    message_template = "Content type '{content_type}' is not supported"

    def __init__(self, content_type: str):
        super().__init__(content_type=content_type)


class RateLimitError(ApiError):
    kind = ErrorKind.RATE_LIMITED
    http_status = 429
    code = "RATE_LIMITED"
    message_template = "Rate limit exceeded: {limit}"

    def __init__(self, limit: str):
        super().__init__(limit=limit)


class HttpError(ApiError):
    """Framework-level HTTP error (405 and friends) carrying its own status."""
    kind = ErrorKind.HTTP
    code = "HTTP_ERROR"
    message_template = "HTTP error {status}"

    def __init__(self, status: int, message: str | None = None):
        self.http_status = status
        self.code = f"HTTP_{status}"
        super().__init__(message, status=status)


class DomainError(ApiError):
    """Base for business-rule failures; subclasses set http_status and code."""
    kind = ErrorKind.DOMAIN
    http_status = 422
    code = "DOMAIN_ERROR"
    message_template = "Business rule violated"


class InvalidCredentialsError(DomainError):
    http_status = 401
    code = "INVALID_CREDENTIALS"
    message_template = "Invalid email or password"


class InactiveUserError(DomainError):
    http_status = 403
    code = "USER_INACTIVE"
    message_template = "User account is inactive"


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ApiError):
    """Database operation failed."""
    kind = ErrorKind.DATABASE
    http_status = 503
    code = "DATABASE_ERROR"
    message_template = "Database {operation} failed"

    def __init__(self, message: str, operation: str):
        super().__init__(
            self.message_template.format(operation=operation),
        )
        self.operation = operation
        self.reason = message


class InternalError(ApiError):
    kind = ErrorKind.INTERNAL
