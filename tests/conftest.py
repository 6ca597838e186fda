"""Pytest configuration and fixtures.

Provides environment isolation and test doubles for the HTTP transport and
the provider layer. No test here talks to a real vendor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from storeagent.audit import MemoryAuditSink
from storeagent.config import MemoryConfigStore
from storeagent.http import HttpResponse
from storeagent.providers.base import ChatOptions, ChatResult, Message, ToolSpec
from storeagent.tools import ToolRegistry
from storeagent.usage import UsageLedger

TODAY = "2026-03-14"

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class RecordedRequest:
    url: str
    method: str
    headers: dict[str, str]
    json_body: dict[str, Any] | None
    timeout: float


@dataclass
class FakeHttpClient:
    """HttpClient double: records every request and replays queued responses.

    Queue ``HttpResponse`` objects (or exceptions to raise) with ``queue``.
    An empty queue answers 200 with an empty JSON object.
    """

    requests: list[RecordedRequest] = field(default_factory=list)
    responses: list[Any] = field(default_factory=list)

    def queue(self, *responses: Any) -> FakeHttpClient:
        self.responses.extend(responses)
        return self

    def ok(self, body: dict) -> FakeHttpClient:
        return self.queue(HttpResponse(200, body))

    def request(self, url, method="POST", headers=None, json_body=None, timeout=60):
        self.requests.append(RecordedRequest(url, method, dict(headers or {}), json_body, timeout))
        response = self.responses.pop(0) if self.responses else HttpResponse(200, {})
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]


@dataclass
class StubProvider:
    """Provider double for the tool loop: returns scripted ChatResults in order.

    When the script runs out the last entry is repeated.
    """

    script: list[Any]
    calls: list[list[Message]] = field(default_factory=list)
    tools_seen: list[list[ToolSpec]] = field(default_factory=list)
    id: str = "stub"
    name: str = "Stub"
    model: str = "stub-1"

    def chat_with_tools(self, messages, tools, options: ChatOptions | None = None) -> ChatResult:
        self.calls.append(list(messages))
        self.tools_seen.append(list(tools))
        step = self.script[min(len(self.calls) - 1, len(self.script) - 1)]
        if isinstance(step, Exception):
            raise step
        return step


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config files and the credential secret out of the real home."""
    monkeypatch.setenv("STOREAGENT_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("STOREAGENT_SECRET", raising=False)
    return tmp_path / "home"


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def http():
    return FakeHttpClient()


@pytest.fixture
def store():
    return MemoryConfigStore()


@pytest.fixture
def ledger(store):
    return UsageLedger(store, today=lambda: TODAY)


@pytest.fixture
def audit():
    return MemoryAuditSink()


@pytest.fixture
def registry(audit):
    return ToolRegistry(audit=audit)
