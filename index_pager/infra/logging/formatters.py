"""Log formatters."""
from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from opentelemetry import trace

# Attributes every LogRecord has; anything else on a record came from extra=.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Fields passed with ``extra=`` become top-level keys, so the iterator's
    ``index``/``page``/``kept`` context survives into the output. When the
    caller runs inside an OpenTelemetry span its trace and span ids are
    added.

    Example output:
        {"timestamp": "2025-01-01T00:00:00.123Z", "level": "DEBUG", "logger": "index_pager.core.pagination.iterator", "message": "Fetched page 1 of customer_id_filter", "service": "index-pager", "index": "customer_id_filter", "page": 1, "items": 8, "kept": 8}
    """

    def __init__(self, static: dict[str, Any] | None = None) -> None:
        """Initialize JSON formatter.

        Args:
            static: Fields added to every record (e.g. {"service": "index-pager"}).
        """
        super().__init__()
        self.static = dict(static or {})

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self.static,
        }

        ctx = trace.get_current_span().get_span_context()
        if ctx.is_valid:
            data["trace_id"] = format(ctx.trace_id, "032x")
            data["span_id"] = format(ctx.span_id, "016x")

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            data["stack_trace"] = self.formatStack(record.stack_info)

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in data:
                data[key] = value

        # json.dumps escapes newlines, so tracebacks stay on one line
        return json.dumps(data, ensure_ascii=False, default=str)


def text_formatter() -> logging.Formatter:
    """Plain formatter for humans at a terminal."""
    return logging.Formatter(
        fmt="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
