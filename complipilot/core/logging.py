"""
Logging for the report API.

Everything logs through the "complipilot" logger with a short event name as
the message (``report.saved``, ``usage.limit_reached``) and structured
details in ``extra``. Production emits one JSON object per line; other
environments get a single readable line with the same details appended.
"""

import json
import logging
import os
import sys
from bisect import bisect_right
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

LOGGER_NAME = "complipilot"

request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Record attributes promoted into the formatted output when present
_DETAIL_FIELDS = (
    "path",
    "method",
    "status",
    "latency_bucket",
    "error_code",
    "error_message",
    "tool",
    "user_id",
    "client_ip",
    "event_type",
    "source",
    "count",
)

_LATENCY_EDGES = (10, 100, 500, 1000)
_LATENCY_LABELS = ("<10ms", "10-100ms", "100-500ms", "500-1000ms", ">=1000ms")

MAX_DETAIL_CHARS = 500


def get_request_id(default: Optional[str] = None) -> Optional[str]:
    rid = request_id_ctx_var.get()
    return default if rid is None else rid


def latency_bucket_ms(latency_ms: Optional[float]) -> str:
    """Coarse latency label, so dashboards group on a handful of values."""
    if latency_ms is None:
        return "unknown"
    return _LATENCY_LABELS[bisect_right(_LATENCY_EDGES, latency_ms)]


def _utc_timestamp(record: logging.LogRecord) -> str:
    stamp = datetime.fromtimestamp(record.created, timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _details(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        field: getattr(record, field)
        for field in _DETAIL_FIELDS
        if getattr(record, field, None) is not None
    }


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": _utc_timestamp(record),
            "level": record.levelname.lower(),
            "event": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        entry.update(_details(record))
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class PrettyFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "request_id", None)
        parts = [_utc_timestamp(record), f"{record.levelname:<7}", record.getMessage()]
        parts.extend(f"{key}={value}" for key, value in _details(record).items())
        if rid:
            parts.append(f"rid={rid}")
        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(env: str = "development", level: str = "INFO") -> logging.Logger:
    """Install one stdout handler on the app logger. Safe to call repeatedly."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(str(level).upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if env.lower() == "production" else PrettyFormatter())
    handler.addFilter(RequestIdFilter())
    logger.handlers = [handler]
    # Left on so pytest's caplog still sees records
    logger.propagate = True

    # uvicorn's access log duplicates request.complete
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return logger


def _truncate(value: Any, limit: int = MAX_DETAIL_CHARS) -> Any:
    if isinstance(value, (int, float, bool)) or value is None:
        return value
    text = str(value)
    return text if len(text) <= limit else f"{text[:limit]}...<truncated>"


def log_event(
    level: str,
    msg: str,
    *,
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    tool: Optional[str] = None,
    event_type: Optional[str] = None,
    error_code: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Log ``msg`` with the standard detail fields; free-form extras are truncated."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        configure_logging(os.getenv("ENV", "development"))

    details: Dict[str, Any] = {
        key: _truncate(value) for key, value in (extra or {}).items()
    }
    details.update(
        {
            key: value
            for key, value in (
                ("request_id", request_id or get_request_id()),
                ("user_id", user_id),
                ("tool", tool),
                ("event_type", event_type),
                ("error_code", error_code),
            )
            if value is not None
        }
    )
    logger.log(getattr(logging, level.upper(), logging.INFO), msg, extra=details)
