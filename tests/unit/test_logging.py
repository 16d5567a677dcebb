"""Unit tests for the JSON log formatter."""

from __future__ import annotations

import io
import json
import logging
import sys

from workflow_closure.logging import JsonFormatter, configure_logging


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        "workflow_closure.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None
    )
    record.__dict__.update(extra)
    return record


def test_formats_one_json_object() -> None:
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "workflow_closure.test"
    assert payload["message"] == "hello world"
    assert "extra" not in payload
    assert "exception" not in payload


def test_extra_fields_are_nested() -> None:
    payload = json.loads(JsonFormatter().format(_record(node_id="n1", count=3)))

    assert payload["extra"] == {"node_id": "n1", "count": 3}


def test_exception_is_included() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger = logging.getLogger("workflow_closure.test")
        record = logger.makeRecord(
            logger.name, logging.ERROR, __file__, 1, "failed", (), exc_info=sys.exc_info()
        )

    payload = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: boom" in payload["exception"]


def test_configure_logging_replaces_handlers() -> None:
    stream = io.StringIO()

    configure_logging("debug", stream=stream)
    configure_logging("debug", stream=stream)
    logging.getLogger("workflow_closure.test").debug("once", extra={"k": "v"})

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["extra"] == {"k": "v"}
