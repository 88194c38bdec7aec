"""Structured Logging - JSON formatter fields and handler replacement."""

import json
import logging

from callhub.infrastructure import observability
from callhub.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord(
        "callhub.services.dispatcher", logging.WARNING, __file__, 1,
        "Call failed: %s", ("module ghost not found",), None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_extras():
    payload = json.loads(JSONFormatter().format(
        _record(call_string="ghost.run()", error_code="MODULE_NOT_FOUND"),
    ))
    assert payload["level"] == "WARNING"
    assert payload["message"] == "Call failed: module ghost not found"
    assert payload["call_string"] == "ghost.run()"
    assert payload["error_code"] == "MODULE_NOT_FOUND"
    assert "backend" not in payload


def test_setup_logging_replaces_its_handler():
    setup_logging("DEBUG", "text")
    first = observability._handler
    setup_logging("INFO", "json")
    second = observability._handler
    try:
        assert first not in logging.root.handlers
        assert second in logging.root.handlers
        assert isinstance(second.formatter, JSONFormatter)
        assert logging.root.level == logging.INFO
    finally:
        logging.root.removeHandler(second)
        observability._handler = None
