"""Google Gemini provider."""

from __future__ import annotations

import json
import uuid

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


def google_config(credential: str = "") -> ProviderConfig:
    return ProviderConfig(
        id="google",
        display_name="Google Gemini",
        base_url="https://generativelanguage.googleapis.com/v1beta",
        default_model="gemini-2.5-flash",
        model_catalog=models_for("google"),
        auth_scheme="query",
        fallback_context_length=1048576,
        credential=credential,
    )


class GoogleProvider(Provider):
    """``contents``/``parts`` with the ``model`` role and ``systemInstruction``.

    Gemini matches function responses to calls by function name, not by id.
    If the model calls the same function twice in one turn the results are
    replayed in call order and the vendor has to pair them positionally.
    """

    def build_request(
        self,
        messages: list[Message],
        tools: list[ToolSpec],
        options: ChatOptions,
        model: str,
    ) -> tuple[str, dict]:
        body: dict = {
            "contents": self._convert_messages(messages),
            "generationConfig": {
                "maxOutputTokens": int(options.max_tokens),
                "temperature": float(options.temperature),
            },
        }
        if tools:
            body["tools"] = self.convert_tools(tools)
        system = self.system_text(messages, options)
        if system:
            body["systemInstruction"] = {"parts": [{"text": system}]}
        return f"models/{model}:generateContent", body

    def parse_response(self, body: dict, model: str, require_text: bool) -> ChatResult:
        candidate = dig(body, "candidates", 0)
        if not isinstance(candidate, dict):
            raise InvalidResponse(f"Invalid response from {self.name} API.")

        content = ""
        has_text = False
        tool_calls = []
        for part in dig(candidate, "content", "parts") or []:
            if not isinstance(part, dict):
                continue
            if "functionCall" in part:
                fc = part["functionCall"] or {}
                tool_calls.append(ToolCall.create(
                    id=f"call_{uuid.uuid4().hex[:24]}",
                    name=fc.get("name", ""),
                    args=fc.get("args"),
                ))
            elif "text" in part:
                has_text = True
                content += part["text"] or ""

        usage = _usage(body.get("usageMetadata"))

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
        declarations = []
        for t in tools:
            # Reshape the OpenAI projection into a function declaration
            function = to_openai_tool(t)["function"]
            declarations.append({
                "name": function["name"],
                "description": function["description"],
                "parameters": _jsonschema_to_gemini(function["parameters"]),
            })
        return [{"function_declarations": declarations}]

    def _convert_messages(self, messages: list[Message]) -> list[dict]:
        """Convert canonical messages to Gemini's format."""
        result = []
        call_names: dict[str, str] = {}
        for msg in messages:
            if msg.role == "user":
                result.append({"role": "user", "parts": [{"text": msg.content}]})

            elif msg.role == "assistant":
                parts = []
                if msg.content:
                    parts.append({"text": msg.content})
                for tc in msg.tool_calls:
                    call_names[tc.id] = tc.name
                    parts.append({"functionCall": {"name": tc.name, "args": tc.args}})
                if not parts:
                    parts.append({"text": ""})
                result.append({"role": "model", "parts": parts})

            elif msg.role == "tool":
                name = msg.name or call_names.get(msg.tool_call_id or "", "function_result")
                part = {
                    "functionResponse": {
                        "name": name,
                        "response": {"result": _result_payload(msg.content)},
                    },
                }
                # Batch consecutive tool results into one user turn
                if result and result[-1]["role"] == "user" and any(
                    "functionResponse" in p for p in result[-1]["parts"]
                ):
                    result[-1]["parts"].append(part)
                else:
                    result.append({"role": "user", "parts": [part]})

        return result


def _result_payload(content: str):
    """Tool results are JSON text; hand Gemini the structure when we can."""
    try:
        return json.loads(content)
    except (TypeError, ValueError):
        return content


def _jsonschema_to_gemini(schema: dict) -> dict:
    """Convert a JSON Schema dict to a Gemini-compatible schema dict.

    Gemini's schema format is close to JSON Schema but rejects several
    keywords (``additionalProperties``, ``$schema``, ``default``). Object
    schemas always get an explicit ``properties`` object.
    """
    result = {}
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        schema_type = next((t for t in schema_type if t != "null"), None)
    if schema_type:
        result["type"] = schema_type.upper()
    if "properties" in schema or schema_type == "object":
        result["properties"] = {
            k: _jsonschema_to_gemini(v) for k, v in (schema.get("properties") or {}).items()
        }
    if schema.get("required"):
        result["required"] = list(schema["required"])
    if "description" in schema:
        result["description"] = schema["description"]
    if "items" in schema:
        result["items"] = _jsonschema_to_gemini(schema["items"])
    if "enum" in schema:
        result["enum"] = [str(v) for v in schema["enum"]]
    return result


def _usage(raw) -> Usage:
    raw = raw if isinstance(raw, dict) else {}
    prompt = int(raw.get("promptTokenCount") or 0)
    completion = int(raw.get("candidatesTokenCount") or 0)
    total = int(raw.get("totalTokenCount") or prompt + completion)
    return Usage(prompt, completion, total)


def create_google(credential, http_client=None, ledger=None) -> GoogleProvider:
    return GoogleProvider(google_config(credential), http_client, ledger)
