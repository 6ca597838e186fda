"""Canonical message types and the abstract provider interface."""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal
from urllib.parse import quote

from storeagent.audit import redact
from storeagent.errors import ApiError, InvalidResponse, NotConfigured
from storeagent.http import HttpClient, HttpxClient

if TYPE_CHECKING:
    from storeagent.catalog import ModelInfo
    from storeagent.usage import UsageLedger

log = logging.getLogger(__name__)

Role = Literal["system", "user", "assistant", "tool"]
AuthScheme = Literal["bearer", "api_key_header", "query"]


def encode_arguments(args: Any) -> str:
    """Canonical JSON encoding for tool-call arguments."""
    if isinstance(args, str):
        args = decode_arguments(args)
    return json.dumps(args or {}, ensure_ascii=False, sort_keys=True)


def decode_arguments(raw: Any) -> dict:
    """Vendor argument blob (JSON string or object) to a dict; junk becomes {}."""
    if isinstance(raw, dict):
        return dict(raw)
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        log.warning("Discarding undecodable tool arguments: %.80r", raw)
        return {}
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class ToolCall:
    """A tool call requested by the model. ``arguments`` is a JSON string."""
    id: str
    name: str
    arguments: str = "{}"

    @classmethod
    def create(cls, id: str, name: str, args: Any) -> ToolCall:
        return cls(id=id, name=name, arguments=encode_arguments(args))

    @property
    def args(self) -> dict:
        return decode_arguments(self.arguments)


@dataclass(frozen=True)
class Message:
    """One turn of a conversation. Conversations only ever grow by appending."""
    role: Role
    content: str = ""
    tool_calls: tuple[ToolCall, ...] = ()
    tool_call_id: str | None = None
    name: str | None = None  # tool name on "tool" messages

    @classmethod
    def system(cls, content: str) -> Message:
        return cls("system", content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls("user", content)

    @classmethod
    def assistant(cls, content: str = "", tool_calls: list[ToolCall] | None = None) -> Message:
        return cls("assistant", content, tuple(tool_calls or ()))

    @classmethod
    def tool(cls, tool_call_id: str, content: str, name: str | None = None) -> Message:
        return cls("tool", content, tool_call_id=tool_call_id, name=name)


@dataclass(frozen=True)
class ToolSpec:
    """A tool as the model sees it: name, description and JSON Schema."""
    name: str
    description: str = ""
    parameters: dict = field(default_factory=dict)


def object_schema(parameters: dict | None) -> dict:
    """A parameter schema that always carries ``type`` and ``properties``."""
    schema = dict(parameters or {})
    schema.setdefault("type", "object")
    if schema["type"] == "object" and not isinstance(schema.get("properties"), dict):
        schema["properties"] = {}
    return schema


def to_openai_tool(spec: ToolSpec) -> dict:
    return {
        "type": "function",
        "function": {
            "name": spec.name,
            "description": spec.description,
            "parameters": object_schema(spec.parameters),
        },
    }


def to_anthropic_tool(spec: ToolSpec) -> dict:
    return {
        "name": spec.name,
        "description": spec.description,
        "input_schema": object_schema(spec.parameters),
    }


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: Usage) -> Usage:
        return Usage(
            self.prompt_tokens + other.prompt_tokens,
            self.completion_tokens + other.completion_tokens,
            self.total_tokens + other.total_tokens,
        )


@dataclass(frozen=True)
class ChatOptions:
    model: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2048
    system_prompt: str | None = None
    timeout_seconds: int = 60


@dataclass
class ChatResult:
    """Unified result from any provider."""
    kind: Literal["content", "tool_calls"]
    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    model: str = ""

    @property
    def has_tool_calls(self) -> bool:
        return self.kind == "tool_calls"

    def as_message(self) -> Message:
        """The assistant turn to append before replaying tool results."""
        return Message.assistant(self.content, self.tool_calls)


@dataclass
class ProviderConfig:
    """Static description of one vendor endpoint."""
    id: str
    display_name: str
    base_url: str
    default_model: str
    model_catalog: dict[str, ModelInfo] = field(default_factory=dict)
    auth_scheme: AuthScheme = "bearer"
    fallback_context_length: int = 8192
    credential: str = ""
    extra_headers: dict[str, str] = field(default_factory=dict)


class Provider(ABC):
    """Abstract base for vendor adapters.

    Subclasses translate canonical messages and tools into one vendor's wire
    format (``build_request``) and normalize the vendor's answer back
    (``parse_response``). Transport, authentication, error mapping and usage
    accounting live here.
    """

    def __init__(
        self,
        config: ProviderConfig,
        http_client: HttpClient | None = None,
        ledger: UsageLedger | None = None,
    ):
        self.config = config
        self.http = http_client or HttpxClient()
        self.ledger = ledger
        self._model = config.default_model

    # --- identity and catalog ---

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.display_name

    @property
    def default_model(self) -> str:
        return self.config.default_model

    @property
    def model(self) -> str:
        return self._model

    @model.setter
    def model(self, model_id: str) -> None:
        self._model = model_id or self.config.default_model

    def is_configured(self) -> bool:
        return bool(self.config.credential)

    def available_models(self) -> dict[str, ModelInfo]:
        return dict(self.config.model_catalog)

    def max_context_length(self, model: str | None = None) -> int:
        info = self.config.model_catalog.get(model or self._model)
        if info is not None:
            return info.context_window
        return self.config.fallback_context_length

    def count_tokens(self, text: str) -> int:
        """Rough estimate: about four characters per token."""
        return math.ceil(len(text) / 4)

    # --- chat ---

    def chat(self, messages: list[Message], options: ChatOptions | None = None) -> ChatResult:
        """Plain completion; the reply must contain text."""
        return self._complete(messages, [], options or ChatOptions(), require_text=True)

    def chat_with_tools(
        self,
        messages: list[Message],
        tools: list[ToolSpec],
        options: ChatOptions | None = None,
    ) -> ChatResult:
        """Completion with a tool catalog; may come back as tool calls."""
        return self._complete(messages, tools, options or ChatOptions(), require_text=False)

    def validate_credential(self) -> None:
        """Issue a tiny real request. Raises the resulting error, if any."""
        if not self.is_configured():
            raise NotConfigured(
                f"No API key provided for {self.name}.",
                hint=f"Run: store-agent set-key {self.id} <key>",
            )
        self.chat([Message.user("Hello")], ChatOptions(max_tokens=10))

    @abstractmethod
    def build_request(
        self,
        messages: list[Message],
        tools: list[ToolSpec],
        options: ChatOptions,
        model: str,
    ) -> tuple[str, dict]:
        """Return (endpoint path, JSON body) for one request."""

    @abstractmethod
    def parse_response(self, body: dict, model: str, require_text: bool) -> ChatResult:
        """Normalize a 2xx body into a ChatResult or raise InvalidResponse."""

    @abstractmethod
    def convert_tools(self, tools: list[ToolSpec]) -> list[dict]:
        """Convert tool specs to the vendor's declaration format."""

    def _complete(
        self,
        messages: list[Message],
        tools: list[ToolSpec],
        options: ChatOptions,
        require_text: bool,
    ) -> ChatResult:
        if not self.is_configured():
            raise NotConfigured(
                f"{self.name} provider is not configured. Please add your API key.",
                hint=f"Run: store-agent set-key {self.id} <key>",
            )
        if not messages:
            raise ValueError("messages must not be empty")

        model = options.model or self._model
        endpoint, body = self.build_request(messages, tools, options, model)
        log.debug("%s chat request model=%s tools=%d", self.name, model, len(tools))
        response_body = self._post(endpoint, body, options.timeout_seconds)

        try:
            result = self.parse_response(response_body, model, require_text)
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            log.error("%s API Response could not be parsed: %s", self.name, e)
            raise InvalidResponse(f"Invalid response from {self.name} API.") from e
        if self.ledger is not None:
            self.ledger.record(self.id, result.usage)
        return result

    # --- transport ---

    def _url(self, endpoint: str) -> str:
        url = self.config.base_url.rstrip("/") + "/" + endpoint.lstrip("/")
        if self.config.auth_scheme == "query":
            url += ("&" if "?" in url else "?") + "key=" + quote(self.config.credential, safe="")
        return url

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.auth_scheme == "bearer":
            headers["Authorization"] = f"Bearer {self.config.credential}"
        elif self.config.auth_scheme == "api_key_header":
            headers["x-api-key"] = self.config.credential
        headers.update(self.config.extra_headers)
        return headers

    def _post(self, endpoint: str, body: dict, timeout: float) -> dict:
        log.debug("%s API Request to %s: %s", self.name, endpoint, redact(body))
        try:
            response = self.http.request(
                self._url(endpoint),
                method="POST",
                headers=self._headers(),
                json_body=body,
                timeout=timeout,
            )
        except ApiError as e:
            e.provider = self.id
            log.error("%s API Request failed: %s", self.name, e)
            raise

        if not response.ok:
            message = _vendor_error_message(response.body) or (
                f"API request failed with status code {response.status_code}."
            )
            log.error("%s API Response: %d ERROR - %s", self.name, response.status_code, message)
            raise ApiError(
                message,
                status_code=response.status_code,
                raw_body=response.body if response.body is not None else response.text,
                provider=self.id,
            )

        log.debug("%s API Response: %d OK", self.name, response.status_code)
        return response.body if isinstance(response.body, dict) else {}

    # --- shared translation helpers ---

    @staticmethod
    def system_text(messages: list[Message], options: ChatOptions) -> str:
        """Effective system prompt: the option first, then system messages."""
        parts = []
        if options.system_prompt:
            parts.append(options.system_prompt)
        parts.extend(m.content for m in messages if m.role == "system" and m.content)
        return "\n\n".join(parts)


def _vendor_error_message(body: Any) -> str | None:
    """Pull ``error.message`` out of a vendor error body, if there is one."""
    if isinstance(body, list) and body:
        body = body[0]
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    if isinstance(error, str):
        return error
    return None


def dig(data: Any, *path: Any) -> Any:
    """Follow keys/indexes into nested JSON; None when any step is missing."""
    for step in path:
        if isinstance(step, int):
            if not isinstance(data, list) or not -len(data) <= step < len(data):
                return None
        elif not isinstance(data, dict):
            return None
        data = data[step] if isinstance(step, int) else data.get(step)
    return data
