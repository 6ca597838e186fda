"""Exception hierarchy for the provider layer."""

from __future__ import annotations

from typing import Any


class StoreAgentError(Exception):
    """Base exception for all store-agent errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class NotConfigured(StoreAgentError):
    """No credential is available for the selected provider."""


class InvalidProvider(StoreAgentError):
    """Unknown provider id, or a provider id registered twice."""


class ApiError(StoreAgentError):
    """The vendor answered with a non-2xx status, or could not be reached.

    ``status_code`` is None for transport failures (timeouts, refused
    connections).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        raw_body: Any = None,
        provider: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code = status_code
        self.raw_body = raw_body
        self.provider = provider


class InvalidResponse(StoreAgentError):
    """A 2xx response that lacks the fields the adapter expects."""


class InvalidTool(StoreAgentError):
    """A tool name that is not registered."""


class InvalidCallback(StoreAgentError):
    """A registered tool whose callback cannot be invoked."""


class ToolExecutionError(StoreAgentError):
    """A tool callback raised."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


class ToolLoopExceeded(StoreAgentError):
    """The model kept requesting tools past the iteration bound."""

    def __init__(self, iterations: int) -> None:
        super().__init__(
            f"Stopped after {iterations} rounds of tool calls without a final answer.",
            hint="Rephrase the request or raise max_iterations.",
        )
        self.iterations = iterations
