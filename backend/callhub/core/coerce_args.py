"""Argument Coercer - converts one textual argument token into a typed value.

Invariants:
    - Total: never raises; unrecognized tokens come back as the same string
    - Rule order is fixed and first match wins (quoted "123" stays a string)
    - Quoted tokens are unwrapped verbatim, with no unescaping of inner quotes
"""

import re
from typing import Any

_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER = re.compile(r"[+-]?\d+")

_KEYWORDS: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
}


def coerce_arg(token: str) -> Any:
    """Coerce a stripped argument token."""
    if _is_wrapped(token, "\"") or _is_wrapped(token, "'"):
        return token[1:-1]
    if token in _KEYWORDS:
        return _KEYWORDS[token]
    if _NUMBER.fullmatch(token):
        try:
            return int(token) if _INTEGER.fullmatch(token) else float(token)
        except ValueError:
            # int() refuses digit strings past sys.get_int_max_str_digits()
            return token
    return token


def coerce_args(tokens: tuple[str, ...] | list[str]) -> list[Any]:
    """Coerce every token independently, preserving order."""
    return [coerce_arg(token) for token in tokens]


def _is_wrapped(token: str, quote: str) -> bool:
    return len(token) >= 2 and token[0] == quote and token[-1] == quote
