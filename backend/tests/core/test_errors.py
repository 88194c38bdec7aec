"""Error Hierarchy - codes, categories and the REST envelope.

Tests cover:
    - Resolution errors share the ResolutionError base
    - to_response() is the flat {"error", "code", "category"} shape
    - Context fields are filled by the specific error classes
"""

from callhub.core.errors import (
    CallHubError,
    CallParseError,
    ErrorCategory,
    HandlerFunctionNotFoundError,
    HandlerModuleNotFoundError,
    ModuleLoadError,
    PersistenceError,
    QueryForbiddenError,
    ResolutionError,
)


def test_resolution_errors_share_base():
    for exc in (
        HandlerModuleNotFoundError("ghost"),
        HandlerFunctionNotFoundError("cat", "fly"),
        ModuleLoadError("cat", "SyntaxError"),
    ):
        assert isinstance(exc, ResolutionError)
        assert exc.category == ErrorCategory.RESOLUTION


def test_module_not_found_message():
    exc = HandlerModuleNotFoundError("ghost")
    assert exc.message == "module ghost not found"
    assert exc.context.module_name == "ghost"
    assert exc.http_status == 404


def test_function_not_found_context():
    exc = HandlerFunctionNotFoundError("cat", "fly")
    assert exc.context.function_name == "fly"
    assert "fly" in exc.message and "cat" in exc.message


def test_parse_error_keeps_call_string():
    exc = CallParseError("cat.walk(", "shape")
    assert exc.context.call_string == "cat.walk("
    assert exc.http_status == 400


def test_to_response_is_flat():
    assert QueryForbiddenError().to_response() == {
        "error": "Only single read-only SELECT statements are allowed",
        "code": "QUERY_FORBIDDEN",
        "category": "forbidden",
    }


def test_persistence_error_names_operation():
    exc = PersistenceError("disk full", "insert")
    assert isinstance(exc, CallHubError)
    assert exc.message == "Database insert failed: disk full"
    assert exc.http_status == 503
