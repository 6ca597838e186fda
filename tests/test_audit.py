"""Tests for audit sinks and log redaction."""

from __future__ import annotations

import logging

from storeagent.audit import LoggingAuditSink, redact


def test_redact_masks_credentials():
    data = {
        "api_key": "sk-1",
        "Authorization": "Bearer sk-1",
        "x-api-key": "ak-1",
        "nested": [{"client_secret": "s", "value": "keep"}],
        "max_tokens": 100,
        "model": "gpt-4o",
    }

    assert redact(data) == {
        "api_key": "[REDACTED]",
        "Authorization": "[REDACTED]",
        "x-api-key": "[REDACTED]",
        "nested": [{"client_secret": "[REDACTED]", "value": "keep"}],
        "max_tokens": 100,
        "model": "gpt-4o",
    }


def test_redact_truncates_long_strings():
    long = "x" * 600

    assert redact({"content": long})["content"] == "x" * 100 + "...[truncated, 600 chars]"
    assert redact("short") == "short"


def test_logging_sink_levels(caplog):
    sink = LoggingAuditSink(logging.getLogger("storeagent.audit.test"))

    with caplog.at_level(logging.INFO, logger="storeagent.audit.test"):
        sink.record("tool.started", {"name": "update_setting", "arguments": {"token": "t"}})
        sink.record("tool.failed", {"name": "update_setting", "error": "ToolExecutionError"})

    assert [r.levelno for r in caplog.records] == [logging.INFO, logging.ERROR]
    assert "[REDACTED]" in caplog.records[0].getMessage()
    assert "'t'" not in caplog.records[0].getMessage()
