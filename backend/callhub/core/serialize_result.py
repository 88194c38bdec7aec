"""Result Serialization - renders handler results as storable JSON text and back.

Invariants:
    - serialize_result never raises for any Python value
    - Callables -> "[Function]", exceptions -> "[Error: <message>]", cycles -> "[Circular]"
    - Shared (non-cyclic) references are serialized normally each time they appear
    - deserialize_result returns the raw text when it is not valid JSON

Design Decisions:
    - to_jsonable() is shared with the /execute route so the HTTP envelope and the
      stored row render the same placeholders
    - Cycle detection tracks the ids of containers on the current path only
"""

import json
import math
from collections.abc import Mapping
from typing import Any

FUNCTION_PLACEHOLDER = "[Function]"
CIRCULAR_PLACEHOLDER = "[Circular]"


def error_placeholder(exc: BaseException) -> str:
    return f"[Error: {exc}]"


def to_jsonable(value: Any) -> Any:
    """Convert an arbitrary value into JSON-native types."""
    return _convert(value, frozenset())


def _convert(value: Any, ancestors: frozenset[int]) -> Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        # NaN/inf have no JSON form
        return value if math.isfinite(value) else None
    if isinstance(value, BaseException):
        return error_placeholder(value)
    if callable(value):
        return FUNCTION_PLACEHOLDER
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        if id(value) in ancestors:
            return CIRCULAR_PLACEHOLDER
        path = ancestors | {id(value)}
        if isinstance(value, Mapping):
            return {str(k): _convert(v, path) for k, v in value.items()}
        return [_convert(item, path) for item in value]
    return str(value)


def serialize_result(value: Any) -> str:
    """Serialize a handler result for the `calls.result` column."""
    return json.dumps(to_jsonable(value), ensure_ascii=False)


def deserialize_result(text: str | None) -> Any:
    """Parse stored result text; fall back to the raw text."""
    if text is None:
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return text
