"""Tool-invocation loop: model turn, tool execution, resubmission."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from storeagent.errors import StoreAgentError, ToolLoopExceeded
from storeagent.providers.base import ChatOptions, ChatResult, Message, ToolCall, Usage

if TYPE_CHECKING:
    from storeagent.display import Display
    from storeagent.providers.base import Provider
    from storeagent.tools import ToolRegistry, ToolResult

log = logging.getLogger(__name__)

MAX_ITERATIONS = 5


@dataclass
class TurnResult:
    """Outcome of one conversation turn.

    ``messages`` is the conversation including everything this turn added,
    ready to be extended with the next user message. On
    ``confirmation_required`` nothing from the pending batch has run;
    pass the result to ``ToolLoop.resume`` once the operator agrees.
    ``iterations`` counts provider calls made so far in this turn.
    """
    status: Literal["done", "confirmation_required", "error"]
    content: str = ""
    tool_results: list[ToolResult] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    pending_calls: list[ToolCall] = field(default_factory=list)
    error: StoreAgentError | None = None
    usage: Usage = field(default_factory=Usage)
    model: str = ""
    iterations: int = 0
    _pending: ChatResult | None = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.status == "done"


class ToolLoop:
    """Drives a provider through rounds of tool calls until it answers in text.

    Calls from one model response run sequentially in the order the model
    returned them. Destructive tools stop the turn with
    ``confirmation_required`` unless the caller authorized them up front.
    """

    def __init__(
        self,
        provider: Provider,
        registry: ToolRegistry,
        max_iterations: int = MAX_ITERATIONS,
        display: Display | None = None,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.provider = provider
        self.registry = registry
        self.max_iterations = max_iterations
        self.display = display

    def run(
        self,
        messages: list[Message],
        options: ChatOptions | None = None,
        authorize_destructive: bool = False,
    ) -> TurnResult:
        """Process one turn for ``messages`` (which is not modified)."""
        return self._loop(list(messages), options or ChatOptions(), authorize_destructive)

    def resume(self, turn: TurnResult, options: ChatOptions | None = None) -> TurnResult:
        """Execute the calls a confirmation_required turn held back, then continue."""
        if turn.status != "confirmation_required" or turn._pending is None:
            raise ValueError("Only a confirmation_required turn can be resumed")
        return self._loop(
            list(turn.messages),
            options or ChatOptions(),
            authorize_destructive=True,
            pending=turn._pending,
            results=list(turn.tool_results),
            usage=turn.usage,
            used=turn.iterations,
        )

    def _loop(
        self,
        conversation: list[Message],
        options: ChatOptions,
        authorize_destructive: bool,
        pending: ChatResult | None = None,
        results: list[ToolResult] | None = None,
        usage: Usage = Usage(),
        used: int = 0,
    ) -> TurnResult:
        results = results or []
        model = ""

        if pending is not None:
            self._execute_batch(pending, conversation, results)

        for iteration in range(used + 1, self.max_iterations + 1):
            try:
                response = self.provider.chat_with_tools(conversation, self.registry.specs(), options)
            except StoreAgentError as e:
                log.error("Provider call failed on iteration %d: %s", iteration, e)
                return _failed(e, conversation, results, usage, model, iteration)

            usage = usage + response.usage
            model = response.model or model

            if not response.has_tool_calls:
                conversation.append(Message.assistant(response.content))
                return TurnResult(
                    status="done",
                    content=response.content,
                    tool_results=results,
                    messages=conversation,
                    usage=usage,
                    model=model,
                    iterations=iteration,
                )

            log.debug(
                "Iteration %d: model requested %s",
                iteration, ", ".join(tc.name for tc in response.tool_calls),
            )
            held = [tc for tc in response.tool_calls if self.registry.is_destructive(tc.name)]
            if held and not authorize_destructive:
                log.info("Confirmation required for %s", ", ".join(tc.name for tc in held))
                return TurnResult(
                    status="confirmation_required",
                    content=response.content,
                    tool_results=results,
                    messages=conversation,
                    pending_calls=list(response.tool_calls),
                    usage=usage,
                    model=model,
                    iterations=iteration,
                    _pending=response,
                )

            self._execute_batch(response, conversation, results)

        return _failed(
            ToolLoopExceeded(self.max_iterations), conversation, results, usage, model, self.max_iterations,
        )

    def _execute_batch(
        self,
        response: ChatResult,
        conversation: list[Message],
        results: list[ToolResult],
    ) -> None:
        conversation.append(response.as_message())
        for tc in response.tool_calls:
            if self.display:
                self.display.tool_call(tc.name, tc.args)
            result = self.registry.execute(tc.name, tc.arguments, tool_call_id=tc.id)
            if self.display:
                self.display.tool_result(tc.name, result.text())
            results.append(result)
            conversation.append(result.as_message())


def _failed(
    error: StoreAgentError,
    conversation: list[Message],
    results: list[ToolResult],
    usage: Usage,
    model: str,
    iterations: int,
) -> TurnResult:
    return TurnResult(
        status="error",
        content=f"Sorry, I couldn't complete that request: {error.message}",
        tool_results=results,
        messages=conversation,
        error=error,
        usage=usage,
        model=model,
        iterations=iterations,
    )
