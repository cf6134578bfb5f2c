"""Input Sanitization - pure cleanup of decoded JSON request bodies.

Invariants:
    - Never mutates its input; returns a new structure
    - Keys starting with '$' are dropped at every depth (operator injection)
    - Control characters other than tab/newline/carriage return are removed
    - '&', '<', '>' in string values are HTML-escaped
    - Documents nested deeper than MAX_NESTING_DEPTH are rejected, not walked
"""

import html
import re
from typing import Any

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

MAX_NESTING_DEPTH = 64


class NestingTooDeepError(ValueError):
    """Decoded document nests containers deeper than the allowed depth."""


def sanitize_string(value: str) -> str:
    return html.escape(_CONTROL_CHARS.sub("", value), quote=False)


def sanitize_payload(value: Any, max_depth: int = MAX_NESTING_DEPTH) -> Any:
    return _sanitize(value, max_depth, 0)


def _sanitize(value: Any, max_depth: int, depth: int) -> Any:
    if isinstance(value, (dict, list)) and depth >= max_depth:
        raise NestingTooDeepError(f"JSON body nests deeper than {max_depth} levels")
    if isinstance(value, dict):
        return {
            sanitize_string(str(key)): _sanitize(item, max_depth, depth + 1)
            for key, item in value.items()
            if not str(key).startswith("$")
        }
    if isinstance(value, list):
        return [_sanitize(item, max_depth, depth + 1) for item in value]
    if isinstance(value, str):
        return sanitize_string(value)
    return value
