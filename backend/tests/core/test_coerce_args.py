"""Argument Coercer - rule order and per-category results.

Tests cover:
    - Quoted tokens stay strings, even when numeric or keyword-like
    - Booleans, null, undefined
    - Integers vs floats
    - Unrecognized tokens pass through unchanged
"""

import pytest

from callhub.core.coerce_args import coerce_arg, coerce_args


def test_double_quoted_numeric_stays_string():
    assert coerce_arg('"123"') == "123"


def test_single_quoted_keyword_stays_string():
    assert coerce_arg("'true'") == "true"


def test_quoted_text_is_not_unescaped():
    assert coerce_arg('"say \\"hi\\""') == 'say \\"hi\\"'


def test_empty_quotes_give_empty_string():
    assert coerce_arg('""') == ""


@pytest.mark.parametrize("token, expected", [
    ("true", True),
    ("false", False),
])
def test_booleans(token, expected):
    assert coerce_arg(token) is expected


@pytest.mark.parametrize("token", ["null", "undefined"])
def test_null_and_undefined_are_none(token):
    assert coerce_arg(token) is None


@pytest.mark.parametrize("token, expected", [
    ("123", 123),
    ("-7", -7),
    ("+4", 4),
    ("0", 0),
])
def test_integers(token, expected):
    value = coerce_arg(token)
    assert value == expected
    assert isinstance(value, int) and not isinstance(value, bool)


@pytest.mark.parametrize("token, expected", [
    ("1.5", 1.5),
    (".5", 0.5),
    ("5.", 5.0),
    ("1e3", 1000.0),
    ("-2.5E-1", -0.25),
])
def test_floats(token, expected):
    value = coerce_arg(token)
    assert isinstance(value, float)
    assert value == expected


@pytest.mark.parametrize("token", ["tomy", "True", "NULL", "1_000", "0x10", "inf", "nan", "", "1.2.3"])
def test_unrecognized_tokens_pass_through(token):
    assert coerce_arg(token) == token


def test_coerce_args_preserves_order():
    assert coerce_args(('"a"', "2", "false")) == ["a", 2, False]


def test_oversized_integer_passes_through():
    token = "9" * 5000
    assert coerce_arg(token) == token
