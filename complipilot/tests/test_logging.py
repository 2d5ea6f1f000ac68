import json
import logging

import pytest

from complipilot.core.logging import (
    JsonFormatter,
    PrettyFormatter,
    latency_bucket_ms,
    log_event,
    request_id_ctx_var,
)


@pytest.mark.parametrize(
    "latency, bucket",
    [(None, "unknown"), (3, "<10ms"), (10, "10-100ms"), (250, "100-500ms"), (999.9, "500-1000ms"), (1000, ">=1000ms")],
)
def test_latency_buckets(latency, bucket):
    assert latency_bucket_ms(latency) == bucket


def _record(**extra):
    record = logging.LogRecord("complipilot", logging.INFO, __file__, 1, "usage.limit_reached", None, None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_promotes_details():
    line = JsonFormatter().format(_record(request_id="rid-1", tool="grantgenie", count=30, irrelevant="x"))
    entry = json.loads(line)
    assert entry["event"] == "usage.limit_reached"
    assert entry["level"] == "info"
    assert entry["request_id"] == "rid-1"
    assert entry["tool"] == "grantgenie"
    assert entry["count"] == 30
    assert "irrelevant" not in entry
    assert entry["ts"].endswith("Z")


def test_pretty_formatter_is_one_line():
    line = PrettyFormatter().format(_record(request_id="rid-2", tool="complipilot"))
    assert "usage.limit_reached" in line
    assert "tool=complipilot" in line
    assert line.endswith("rid=rid-2")
    assert "\n" not in line


def test_log_event_truncates_and_binds_request_id(caplog):
    token = request_id_ctx_var.set("rid-ctx")
    try:
        with caplog.at_level(logging.INFO, logger="complipilot"):
            log_event("warning", "report.saved", tool="complipilot", extra={"note": "x" * 600, "count": 2})
    finally:
        request_id_ctx_var.reset(token)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.request_id == "rid-ctx"
    assert record.tool == "complipilot"
    assert record.count == 2
    assert record.note.endswith("...<truncated>")
    assert len(record.note) == 500 + len("...<truncated>")
