"""Tool registry: named, schema-described operations the model may invoke."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

from storeagent.audit import AuditSink, LoggingAuditSink
from storeagent.errors import (
    InvalidCallback,
    InvalidTool,
    StoreAgentError,
    ToolExecutionError,
)
from storeagent.providers.base import (
    Message,
    ToolSpec,
    decode_arguments,
    to_anthropic_tool,
    to_openai_tool,
)

PROJECTIONS = {
    "openai": to_openai_tool,
    "anthropic": to_anthropic_tool,
}


@dataclass
class ToolDefinition:
    """A registered operation. ``destructive`` tools need explicit authorization."""
    name: str
    description: str = ""
    parameters: dict = field(default_factory=dict)
    callback: Callable[[dict], Any] | None = None
    destructive: bool = False

    @property
    def spec(self) -> ToolSpec:
        return ToolSpec(self.name, self.description, self.parameters)


@dataclass
class ToolResult:
    """Outcome of one tool execution, ready to be replayed to the model."""
    tool_call_id: str
    name: str
    content: Any
    is_error: bool = False
    error: StoreAgentError | None = None

    def text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        return json.dumps(self.content, ensure_ascii=False, default=str)

    def as_message(self) -> Message:
        return Message.tool(self.tool_call_id, self.text(), name=self.name)


class ToolRegistry:
    """Holds tool definitions keyed by name and executes them.

    Re-registering a name replaces the earlier definition. ``execute`` never
    raises for tool problems; unknown tools, bad callbacks and callback
    exceptions all come back as error results.
    """

    def __init__(self, audit: AuditSink | None = None):
        self.audit = audit or LoggingAuditSink()
        self._tools: dict[str, ToolDefinition] = {}

    def register(
        self,
        name: str,
        description: str = "",
        parameters: dict | None = None,
        callback: Callable[[dict], Any] | None = None,
        destructive: bool = False,
    ):
        """Register a tool. Without ``callback`` this returns a decorator."""
        if callback is None:
            def decorator(fn):
                doc = (fn.__doc__ or "").strip()
                self.register(name, description or doc, parameters, fn, destructive)
                return fn
            return decorator

        self._tools[name] = ToolDefinition(
            name=name,
            description=description or "",
            parameters=dict(parameters or {}),
            callback=callback,
            destructive=bool(destructive),
        )
        return self._tools[name]

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def specs(self) -> list[ToolSpec]:
        return [t.spec for t in self._tools.values()]

    def project_for(self, fmt: str) -> list[dict]:
        """Catalog in the "openai" or "anthropic" declaration shape."""
        try:
            project = PROJECTIONS[fmt]
        except KeyError:
            raise ValueError(f"Unknown tool format: {fmt!r}") from None
        return [project(t.spec) for t in self._tools.values()]

    def is_destructive(self, name: str) -> bool:
        tool = self._tools.get(name)
        return tool is not None and tool.destructive

    def execute(self, name: str, arguments: dict | str | None = None, tool_call_id: str = "") -> ToolResult:
        """Run a tool and capture the outcome as a ToolResult."""
        args = decode_arguments(arguments)
        self.audit.record("tool.started", {"name": name, "arguments": args})

        tool = self._tools.get(name)
        if tool is None:
            return self._failure(tool_call_id, name, InvalidTool(f'Tool "{name}" not found.'))
        if not callable(tool.callback):
            return self._failure(
                tool_call_id, name, InvalidCallback(f'Tool "{name}" has no valid callback.')
            )

        try:
            payload = tool.callback(args)
        except Exception as e:
            return self._failure(tool_call_id, name, ToolExecutionError(name, str(e) or type(e).__name__))

        self.audit.record("tool.succeeded", {"name": name})
        return ToolResult(tool_call_id=tool_call_id, name=name, content=payload)

    def _failure(self, tool_call_id: str, name: str, error: StoreAgentError) -> ToolResult:
        self.audit.record("tool.failed", {
            "name": name,
            "error": type(error).__name__,
            "message": error.message,
        })
        return ToolResult(
            tool_call_id=tool_call_id,
            name=name,
            content={"success": False, "message": f"Error: {error.message}"},
            is_error=True,
            error=error,
        )
