"""Multi-vendor LLM provider layer with a tool-invocation loop."""

from __future__ import annotations

import logging

from storeagent.core import ToolLoop, TurnResult
from storeagent.errors import (
    ApiError,
    InvalidCallback,
    InvalidProvider,
    InvalidResponse,
    InvalidTool,
    NotConfigured,
    StoreAgentError,
    ToolExecutionError,
    ToolLoopExceeded,
)
from storeagent.providers import ChatOptions, ChatResult, Message, ProviderFactory, ToolCall
from storeagent.tools import ToolRegistry, ToolResult
from storeagent.usage import UsageLedger

logging.getLogger("storeagent").addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "ChatOptions",
    "ChatResult",
    "InvalidCallback",
    "InvalidProvider",
    "InvalidResponse",
    "InvalidTool",
    "Message",
    "NotConfigured",
    "ProviderFactory",
    "StoreAgentError",
    "ToolCall",
    "ToolExecutionError",
    "ToolLoop",
    "ToolLoopExceeded",
    "ToolRegistry",
    "ToolResult",
    "TurnResult",
    "UsageLedger",
]
