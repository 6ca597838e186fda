"""OpenAI chat-completions provider (also the wire format of xAI and DeepSeek)."""

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
    dig,
    to_openai_tool,
)


def openai_config(credential: str = "") -> ProviderConfig:
    return ProviderConfig(
        id="openai",
        display_name="OpenAI",
        base_url="https://api.openai.com/v1",
        default_model="gpt-4o",
        model_catalog=models_for("openai"),
        auth_scheme="bearer",
        fallback_context_length=8192,
        credential=credential,
    )


class OpenAIProvider(Provider):
    """Flat message list, leading system message, ``tool_calls`` by id."""

    endpoint = "chat/completions"

    def build_request(
        self,
        messages: list[Message],
        tools: list[ToolSpec],
        options: ChatOptions,
        model: str,
    ) -> tuple[str, dict]:
        body: dict = {
            "model": model,
            "messages": self._convert_messages(messages, self.system_text(messages, options)),
            "temperature": float(options.temperature),
            "max_tokens": int(options.max_tokens),
        }
        if tools:
            body["tools"] = self.convert_tools(tools)
            body["tool_choice"] = "auto"
        return self.endpoint, body

    def parse_response(self, body: dict, model: str, require_text: bool) -> ChatResult:
        message = dig(body, "choices", 0, "message")
        if not isinstance(message, dict):
            raise InvalidResponse(f"Invalid response from {self.name} API.")

        usage = _usage(body.get("usage"))
        model = body.get("model") or model

        tool_calls = []
        for tc in message.get("tool_calls") or []:
            function = tc.get("function") or {}
            if not function.get("name"):
                continue
            tool_calls.append(ToolCall.create(
                id=tc.get("id", ""),
                name=function["name"],
                args=function.get("arguments"),
            ))

        if tool_calls and not require_text:
            return ChatResult(
                kind="tool_calls",
                content=message.get("content") or "",
                tool_calls=tool_calls,
                usage=usage,
                model=model,
            )

        content = message.get("content")
        if require_text and not isinstance(content, str):
            raise InvalidResponse(f"Invalid response from {self.name} API.")
        return ChatResult(kind="content", content=content or "", usage=usage, model=model)

    def convert_tools(self, tools: list[ToolSpec]) -> list[dict]:
        return [to_openai_tool(t) for t in tools]

    def _convert_messages(self, messages: list[Message], system: str = "") -> list[dict]:
        """Convert canonical messages to OpenAI's format."""
        result = []
        if system:
            result.append({"role": "system", "content": system})

        for msg in messages:
            if msg.role == "user":
                result.append({"role": "user", "content": msg.content})

            elif msg.role == "assistant":
                m: dict = {"role": "assistant", "content": msg.content or None}
                if msg.tool_calls:
                    m["tool_calls"] = [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.name,
                                "arguments": tc.arguments,
                            },
                        }
                        for tc in msg.tool_calls
                    ]
                elif m["content"] is None:
                    m["content"] = ""
                result.append(m)

            elif msg.role == "tool":
                result.append({
                    "role": "tool",
                    "tool_call_id": msg.tool_call_id,
                    "content": msg.content,
                })

        return result


def _usage(raw) -> Usage:
    raw = raw if isinstance(raw, dict) else {}
    prompt = int(raw.get("prompt_tokens") or 0)
    completion = int(raw.get("completion_tokens") or 0)
    total = int(raw.get("total_tokens") or prompt + completion)
    return Usage(prompt, completion, total)


def create_openai(credential, http_client=None, ledger=None) -> OpenAIProvider:
    return OpenAIProvider(openai_config(credential), http_client, ledger)
