"""Error Hierarchy - taxonomy fields, message templates, immutability.

Tests cover:
    - Each class carries kind, status and code
    - Message templates are formatted from constructor arguments
    - Public fields cannot be reassigned after construction
    - ValidationError keeps per-field order and groups pydantic errors
"""

import pytest

from app.core.errors import (
    ApiError, DatabaseError, ErrorKind, ForbiddenError, HttpError,
    RequestTimeoutError, ResourceNotFoundError, RouteNotFoundError, ValidationError,
)


def test_resource_not_found_formats_template():
    exc = ResourceNotFoundError("User", "42")
    assert exc.kind is ErrorKind.RESOURCE_NOT_FOUND
    assert exc.http_status == 404
    assert exc.code == "RESOURCE_NOT_FOUND"
    assert exc.message == "User '42' not found"
    assert str(exc) == "User '42' not found"


def test_route_not_found_names_method_and_path():
    exc = RouteNotFoundError("GET", "/nope")
    assert exc.message == "Route GET /nope not found"
    assert exc.http_status == 404


def test_timeout_carries_deadline():
    exc = RequestTimeoutError(250)
    assert exc.kind is ErrorKind.TIMEOUT
    assert exc.timeout_ms == 250
    assert "250 ms" in exc.message


def test_http_error_takes_status_from_framework():
    exc = HttpError(405, "Method Not Allowed")
    assert exc.http_status == 405
    assert exc.code == "HTTP_405"
    assert exc.message == "Method Not Allowed"


def test_database_error_hides_driver_message():
    exc = DatabaseError("connection refused on 10.0.0.3", "execute")
    assert exc.message == "Database execute failed"
    assert exc.reason == "connection refused on 10.0.0.3"


def test_public_fields_are_immutable():
    exc = ForbiddenError("delete this user")
    with pytest.raises(AttributeError):
        exc.message = "changed"
    with pytest.raises(AttributeError):
        exc.http_status = 200


def test_details_are_read_only():
    exc = ValidationError({"email": ["required"]})
    with pytest.raises(TypeError):
        exc.details["email"] = ("other",)
    assert exc.details["email"] == ("required",)


def test_immutable_error_can_still_be_raised_and_chained():
    with pytest.raises(ApiError) as info:
        try:
            raise KeyError("x")
        except KeyError as e:
            raise ResourceNotFoundError("User", "1") from e
    assert isinstance(info.value.__cause__, KeyError)


def test_validation_details_keep_field_order():
    exc = ValidationError({"zeta": ["a"], "alpha": ["b", "c"], "mid": ["d"]})
    assert list(exc.details) == ["zeta", "alpha", "mid"]
    assert exc.details["alpha"] == ("b", "c")


def test_from_pydantic_groups_by_field_and_strips_location_prefix():
    exc = ValidationError.from_pydantic([
        {"loc": ("body", "email"), "msg": "Field required"},
        {"loc": ("body", "password"), "msg": "too short"},
        {"loc": ("body", "email"), "msg": "bad pattern"},
        {"loc": ("query", "limit"), "msg": "too big"},
        {"loc": ("body",), "msg": "Field required"},
    ])
    assert list(exc.details) == ["email", "password", "limit", "body"]
    assert exc.details["email"] == ("Field required", "bad pattern")
    assert exc.http_status == 400
