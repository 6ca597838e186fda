"""Anthropic Claude provider."""

from __future__ import annotations

from storeagent.catalog import models_for
from storeagent.errors import InvalidResponse
from storeagent.providers.base import (
    ChatOptions,
    ChatResult,
    Message,
    Provider,
    ProviderConfig,
    ToolCall,
    ToolSpec,
    Usage,
    to_anthropic_tool,
)

API_VERSION = "2023-06-01"


def anthropic_config(credential: str = "") -> ProviderConfig:
    return ProviderConfig(
        id="anthropic",
        display_name="Anthropic",
        base_url="https://api.anthropic.com/v1",
        default_model="claude-3-5-sonnet-20241022",
        model_catalog=models_for("anthropic"),
        auth_scheme="api_key_header",
        fallback_context_length=200000,
        credential=credential,
        extra_headers={"anthropic-version": API_VERSION},
    )


class AnthropicProvider(Provider):
    """Separate ``system`` field; tool calls and results as content blocks."""

    def build_request(
        self,
        messages: list[Message],
        tools: list[ToolSpec],
        options: ChatOptions,
        model: str,
    ) -> tuple[str, dict]:
        body: dict = {
            "model": model,
            "max_tokens": int(options.max_tokens),
            "messages": self._convert_messages(messages),
            "temperature": float(options.temperature),
        }
        system = self.system_text(messages, options)
        if system:
            body["system"] = system
        if tools:
            body["tools"] = self.convert_tools(tools)
        return "messages", body

    def parse_response(self, body: dict, model: str, require_text: bool) -> ChatResult:
        blocks = body.get("content")
        if not isinstance(blocks, list):
            raise InvalidResponse(f"Invalid response from {self.name} API.")

        content = ""
        has_text = False
        tool_calls = []
        for block in blocks:
            if not isinstance(block, dict):
                continue
            if block.get("type") == "text":
                has_text = True
                content += block.get("text", "")
            elif block.get("type") == "tool_use":
                tool_calls.append(ToolCall.create(
                    id=block.get("id", ""),
                    name=block.get("name", ""),
                    args=block.get("input"),
                ))

        usage = _usage(body.get("usage"))
        model = body.get("model") or model

        if tool_calls and not require_text:
            return ChatResult(
                kind="tool_calls",
                content=content,
                tool_calls=tool_calls,
                usage=usage,
                model=model,
            )
        if require_text and not has_text:
            raise InvalidResponse(f"Invalid response from {self.name} API.")
        return ChatResult(kind="content", content=content, usage=usage, model=model)

    def convert_tools(self, tools: list[ToolSpec]) -> list[dict]:
        return [to_anthropic_tool(t) for t in tools]

    def _convert_messages(self, messages: list[Message]) -> list[dict]:
        """Convert canonical messages to Anthropic's format.

        System messages are dropped here; they travel in the ``system`` field.
        """
        result = []
        for msg in messages:
            if msg.role == "user":
                result.append({"role": "user", "content": msg.content})

            elif msg.role == "assistant":
                if not msg.tool_calls:
                    result.append({"role": "assistant", "content": msg.content})
                    continue
                content_blocks = []
                if msg.content:
                    content_blocks.append({"type": "text", "text": msg.content})
                for tc in msg.tool_calls:
                    content_blocks.append({
                        "type": "tool_use",
                        "id": tc.id,
                        "name": tc.name,
                        "input": tc.args,
                    })
                result.append({"role": "assistant", "content": content_blocks})

            elif msg.role == "tool":
                # Anthropic: tool_result blocks go in a user message
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg.tool_call_id,
                    "content": msg.content,
                }
                if result and result[-1]["role"] == "user" and isinstance(result[-1]["content"], list):
                    result[-1]["content"].append(block)
                else:
                    result.append({"role": "user", "content": [block]})

        return result


def _usage(raw) -> Usage:
    raw = raw if isinstance(raw, dict) else {}
    prompt = int(raw.get("input_tokens") or 0)
    completion = int(raw.get("output_tokens") or 0)
    return Usage(prompt, completion, prompt + completion)


def create_anthropic(credential, http_client=None, ledger=None) -> AnthropicProvider:
    return AnthropicProvider(anthropic_config(credential), http_client, ledger)
