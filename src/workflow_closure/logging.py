"""JSON log output for the closure tools.

Every record becomes one JSON object on its own line. Whatever a call site
passes through `extra=` (node ids, references, artifact names) is grouped
under the `extra` key so log processors can filter on it.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

# Computed from a blank record so attributes added by newer Pythons are covered.
_BUILTIN_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _BUILTIN_RECORD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """Render a record as `{timestamp, level, logger, message[, extra][, exception]}`."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = _extra_fields(record)
        if extra:
            entry["extra"] = extra

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Identifiers and paths in `extra` are rendered with str().
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: str, *, stream: TextIO | None = None) -> None:
    """Send all logging to `stream` (stderr unless given) as JSON lines.

    stdout carries the `show` listing and the `serialize` summary, so logs
    stay off it. Calling this again replaces the previous handler.
    """

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=stream if stream is not None else sys.stderr)
    handler.setFormatter(JsonFormatter())

    root.addHandler(handler)
    root.setLevel(level.upper())
