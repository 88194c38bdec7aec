"""Call Expression Parser - turns `module.function(a, b)` text into a ParsedCall.

Invariants:
    - Accepts exactly: identifier "." identifier "(" [args] ")" with identifier = [A-Za-z0-9_]+
    - Any rejected input raises CallParseError; there is no partial match
    - Tokens are stripped; empty argument text yields zero arguments
    - A comma inside a quoted token does not split it
    - Parentheses are only allowed inside quoted tokens (no nested calls)

Design Decisions:
    - Regex for the outer shape, a small scanner for the argument list:
      the scanner is what makes unmatched quotes detectable
    - Quotes carry no escapes; a token is quoted iff it starts and ends with the same quote char
"""

import re

from callhub.core.domain_types import ParsedCall
from callhub.core.errors import CallParseError

_CALL_PATTERN = re.compile(
    r"(?P<module>[A-Za-z0-9_]+)\.(?P<function>[A-Za-z0-9_]+)\((?P<args>.*)\)",
    re.DOTALL,
)
_QUOTES = ("\"", "'")


def parse_call(text: str) -> ParsedCall:
    """Parse a call expression. Raises CallParseError on any malformed input."""
    if not isinstance(text, str):
        raise CallParseError(repr(text), "not a string")
    stripped = text.strip()
    match = _CALL_PATTERN.fullmatch(stripped)
    if not match:
        raise CallParseError(text, "shape")
    raw_args = split_arguments(match.group("args"), call_string=text)
    return ParsedCall(
        module_name=match.group("module"),
        function_name=match.group("function"),
        raw_args=raw_args,
    )


def split_arguments(args_text: str, call_string: str = "") -> tuple[str, ...]:
    """Split argument text on top-level commas into stripped tokens."""
    if not args_text.strip():
        return ()
    tokens: list[str] = []
    current: list[str] = []
    open_quote: str | None = None
    for char in args_text:
        if open_quote:
            current.append(char)
            if char == open_quote:
                open_quote = None
            continue
        if char == ",":
            tokens.append(_check_token("".join(current).strip(), call_string))
            current = []
            continue
        if char in "()":
            raise CallParseError(call_string, "nested parentheses")
        if char in _QUOTES and not "".join(current).strip():
            open_quote = char
        current.append(char)
    if open_quote:
        raise CallParseError(call_string, "unmatched quote")
    tokens.append(_check_token("".join(current).strip(), call_string))
    return tuple(tokens)


def _check_token(token: str, call_string: str) -> str:
    """Reject tokens whose leading/trailing quote characters do not pair up."""
    starts = token[:1] in _QUOTES
    ends = token[-1:] in _QUOTES
    if not starts and not ends:
        return token
    if len(token) >= 2 and starts and token[0] == token[-1]:
        return token
    raise CallParseError(call_string, "unmatched quote")
