"""Audit sink for tool execution and log-data redaction."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

log = logging.getLogger(__name__)

SENSITIVE_KEYS = frozenset({
    "api_key",
    "apikey",
    "key",
    "secret",
    "password",
    "token",
    "authorization",
    "x_api_key",
})
SENSITIVE_SUFFIXES = ("_key", "_secret", "_password", "_token")
MAX_LOGGED_STRING = 500


def redact(data: Any) -> Any:
    """Copy of ``data`` with credential-like keys masked and long strings cut."""
    if isinstance(data, dict):
        clean = {}
        for key, value in data.items():
            lowered = str(key).lower().replace("-", "_")
            if lowered in SENSITIVE_KEYS or lowered.endswith(SENSITIVE_SUFFIXES):
                clean[key] = "[REDACTED]"
            else:
                clean[key] = redact(value)
        return clean
    if isinstance(data, list):
        return [redact(item) for item in data]
    if isinstance(data, str) and len(data) > MAX_LOGGED_STRING:
        return data[:100] + f"...[truncated, {len(data)} chars]"
    return data


@runtime_checkable
class AuditSink(Protocol):
    def record(self, event_kind: str, details: dict[str, Any]) -> None: ...


class LoggingAuditSink:
    """Writes audit events to the ``storeagent.audit`` logger."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or log

    def record(self, event_kind: str, details: dict[str, Any]) -> None:
        level = logging.ERROR if event_kind.endswith("failed") else logging.INFO
        self.logger.log(level, "%s %s", event_kind, redact(details))


class MemoryAuditSink:
    """Keeps events in a list; handy for the CLI summary and for tests."""

    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def record(self, event_kind: str, details: dict[str, Any]) -> None:
        self.events.append((event_kind, dict(details)))

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.events]
