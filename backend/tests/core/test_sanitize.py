"""Input Sanitization - operator keys, control characters, HTML escaping."""

import copy

import pytest

from app.core.sanitize import MAX_NESTING_DEPTH, NestingTooDeepError, sanitize_payload


def test_drops_dollar_prefixed_keys_at_any_depth():
    cleaned = sanitize_payload({"name": "a", "$where": "1", "nested": {"$gt": 1, "ok": 2}})
    assert cleaned == {"name": "a", "nested": {"ok": 2}}


def test_escapes_html_in_strings():
    assert sanitize_payload({"bio": "<script>x</script> & co"}) == {
        "bio": "&lt;script&gt;x&lt;/script&gt; &amp; co",
    }


def test_removes_control_characters_but_keeps_whitespace():
    assert sanitize_payload("a\x00b\tc\nd\x07") == "ab\tc\nd"


def test_leaves_non_strings_alone():
    assert sanitize_payload([1, 2.5, True, None]) == [1, 2.5, True, None]


def test_does_not_mutate_input():
    payload = {"a": ["<b>"], "$x": 1}
    snapshot = copy.deepcopy(payload)
    sanitize_payload(payload)
    assert payload == snapshot


def _nested(depth):
    value = "leaf"
    for _ in range(depth):
        value = [value]
    return value


def test_accepts_nesting_up_to_the_limit():
    assert sanitize_payload(_nested(MAX_NESTING_DEPTH)) == _nested(MAX_NESTING_DEPTH)


def test_rejects_nesting_past_the_limit():
    with pytest.raises(NestingTooDeepError):
        sanitize_payload(_nested(MAX_NESTING_DEPTH + 1))
