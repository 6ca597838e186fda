"""Provider adapters and the factory that resolves them."""

from __future__ import annotations

from storeagent.providers.anthropic import AnthropicProvider
from storeagent.providers.base import (
    ChatOptions,
    ChatResult,
    Message,
    Provider,
    ProviderConfig,
    ToolCall,
    ToolSpec,
    Usage,
)
from storeagent.providers.factory import DEFAULT_PROVIDERS, ProviderFactory
from storeagent.providers.google import GoogleProvider
from storeagent.providers.openai import OpenAIProvider

__all__ = [
    "DEFAULT_PROVIDERS",
    "AnthropicProvider",
    "ChatOptions",
    "ChatResult",
    "GoogleProvider",
    "Message",
    "OpenAIProvider",
    "Provider",
    "ProviderConfig",
    "ProviderFactory",
    "ToolCall",
    "ToolSpec",
    "Usage",
]
