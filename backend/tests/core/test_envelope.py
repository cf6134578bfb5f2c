"""Response Envelope - exactly one of data/error, no input mutation.

Tests cover:
    - success_envelope -> success=True, data set, no error key
    - error_envelope -> success=False, error set, no data key
    - meta echoes correlation id and request timestamp
    - details omitted when absent, lists when present
    - Constructing an inconsistent envelope (both or neither) raises
"""

import copy

import pytest

from app.core.error_registry import RenderedError
from app.core.request_context import RequestContext
from app.resources.envelope import Envelope, ErrorBody, ResponseMeta, error_envelope, success_envelope


@pytest.fixture
def ctx():
    return RequestContext(method="GET", path="/x", correlation_id="corr-1")


def test_success_envelope_carries_data_only(ctx):
    body = success_envelope({"id": 1}, ctx).to_dict()
    assert body["success"] is True
    assert body["data"] == {"id": 1}
    assert "error" not in body
    assert body["meta"] == {"correlationId": "corr-1", "timestamp": ctx.timestamp}


def test_success_envelope_requires_data(ctx):
    with pytest.raises(ValueError):
        success_envelope(None, ctx)


def test_error_envelope_carries_error_only(ctx):
    envelope = error_envelope(RenderedError(404, "RESOURCE_NOT_FOUND", "gone"), ctx)
    body = envelope.to_dict()
    assert envelope.status == 404
    assert body["success"] is False
    assert body["error"] == {"code": "RESOURCE_NOT_FOUND", "message": "gone"}
    assert "data" not in body


def test_error_details_rendered_as_lists(ctx):
    rendered = RenderedError(400, "VALIDATION_ERROR", "bad", {"email": ("a", "b")})
    body = error_envelope(rendered, ctx).to_dict()
    assert body["error"]["details"] == {"email": ["a", "b"]}


def test_transformers_do_not_mutate_input(ctx):
    data = {"items": [{"id": 1}], "pagination": {"limit": 1}}
    snapshot = copy.deepcopy(data)
    success_envelope(data, ctx).to_dict()
    assert data == snapshot


def test_envelope_rejects_both_or_neither():
    meta = ResponseMeta("c", "t")
    with pytest.raises(ValueError):
        Envelope(success=True, meta=meta, error=ErrorBody("X", "y"))
    with pytest.raises(ValueError):
        Envelope(success=False, meta=meta)
    with pytest.raises(ValueError):
        Envelope(success=True, meta=meta)
    with pytest.raises(ValueError):
        Envelope(success=False, meta=meta, data={}, error=ErrorBody("X", "y"))
