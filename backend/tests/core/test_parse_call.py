"""Call Expression Parser - tests for the module.function(args) grammar.

Tests cover:
    - Well-formed calls decompose into module, function and stripped tokens
    - Empty argument lists yield zero tokens
    - Quoted tokens keep commas and parentheses
    - Every malformed shape raises CallParseError (no partial match)
"""

import pytest

from callhub.core.domain_types import ParsedCall
from callhub.core.errors import CallParseError
from callhub.core.parse_call import parse_call, split_arguments


def test_parses_module_function_and_argument():
    parsed = parse_call('cat.walk("tomy")')
    assert parsed == ParsedCall("cat", "walk", ('"tomy"',))


def test_tokens_are_stripped_and_kept_in_order():
    parsed = parse_call("calc.add( 1 ,2,   3 )")
    assert parsed.raw_args == ("1", "2", "3")


@pytest.mark.parametrize("text", ["calc.add()", "calc.add(   )"])
def test_empty_argument_list_yields_no_arguments(text):
    assert parse_call(text).raw_args == ()


def test_surrounding_whitespace_is_ignored():
    assert parse_call("  cat.meow(2)\n").function_name == "meow"


def test_identifiers_allow_digits_and_underscores():
    parsed = parse_call("mod_2.fn_3(x)")
    assert (parsed.module_name, parsed.function_name) == ("mod_2", "fn_3")


def test_comma_inside_quotes_does_not_split():
    assert parse_call('m.f("a,b", c)').raw_args == ('"a,b"', "c")


def test_parentheses_inside_quotes_are_allowed():
    assert parse_call("m.f('(x)')").raw_args == ("'(x)'",)


def test_inner_quote_in_bare_token_is_kept():
    assert parse_call("m.f(it's)").raw_args == ("it's",)


def test_trailing_comma_yields_empty_token():
    assert parse_call("m.f(1,)").raw_args == ("1", "")


@pytest.mark.parametrize("text", [
    "cat.walk",                 # missing parens
    "cat.walk(",                # missing close paren
    "catwalk()",                # missing dot
    "a.b.c()",                  # multiple dots
    "cat.walk() extra",         # trailing characters
    "cat.walk()()",             # trailing call
    "cat.walk(f(1))",           # nested parentheses
    'cat.walk("tomy)',          # unmatched double quote
    "cat.walk('tomy)",          # unmatched single quote
    'cat.walk(tomy")',          # closing quote only
    "cat.walk(\"a' )",          # mismatched quote pair
    "cat-x.walk()",             # identifier with dash
    ".walk()",                  # empty module
    "",
])
def test_malformed_calls_raise_parse_error(text):
    with pytest.raises(CallParseError) as exc_info:
        parse_call(text)
    assert exc_info.value.code == "MALFORMED_CALL"


def test_non_string_input_raises_parse_error():
    with pytest.raises(CallParseError):
        parse_call(None)


def test_split_arguments_on_blank_text():
    assert split_arguments("  ") == ()
