"""Tests for the tool registry."""

from __future__ import annotations

import json

import pytest

from storeagent.errors import InvalidCallback, InvalidTool, ToolExecutionError

SETTING_SCHEMA = {
    "type": "object",
    "properties": {"settingId": {"type": "string"}, "value": {"type": "string"}},
    "required": ["settingId", "value"],
}


def test_register_defaults(registry):
    registry.register("list_orders", callback=lambda args: {"success": True})

    tool = registry.get("list_orders")
    assert tool.description == ""
    assert tool.parameters == {}
    assert tool.destructive is False
    assert "list_orders" in registry
    assert len(registry) == 1


def test_decorator_uses_docstring(registry):
    @registry.register("refund_order", parameters={"type": "object"}, destructive=True)
    def refund(args):
        """Refund an order in full."""
        return {"success": True}

    tool = registry.get("refund_order")
    assert tool.description == "Refund an order in full."
    assert tool.callback is refund
    assert registry.is_destructive("refund_order")


def test_reregistering_replaces_definition(registry):
    registry.register("get_stock", "old", callback=lambda args: 1)
    registry.register("get_stock", "new", callback=lambda args: 2)

    assert len(registry) == 1
    assert registry.get("get_stock").description == "new"
    assert registry.execute("get_stock").content == 2


def test_is_destructive_for_unknown_tool(registry):
    assert registry.is_destructive("nope") is False


def test_project_for_openai(registry):
    registry.register("update_setting", "Change a setting", SETTING_SCHEMA, lambda args: None)
    registry.register("ping", callback=lambda args: "pong")

    projected = registry.project_for("openai")

    assert projected[0] == {
        "type": "function",
        "function": {
            "name": "update_setting",
            "description": "Change a setting",
            "parameters": SETTING_SCHEMA,
        },
    }
    assert projected[1]["function"]["parameters"] == {"type": "object", "properties": {}}


def test_project_for_anthropic(registry):
    registry.register("update_setting", "Change a setting", SETTING_SCHEMA, lambda args: None)

    assert registry.project_for("anthropic") == [{
        "name": "update_setting",
        "description": "Change a setting",
        "input_schema": SETTING_SCHEMA,
    }]


def test_project_for_unknown_format(registry):
    with pytest.raises(ValueError):
        registry.project_for("google")


def test_execute_passes_payload_through(registry, audit):
    seen = []

    def update_setting(args):
        seen.append(args)
        return {"success": True, "message": "Updated", "previous": "yes"}

    registry.register("update_setting", callback=update_setting)

    result = registry.execute("update_setting", '{"settingId": "guest_checkout", "value": "no"}', "call_1")

    assert seen == [{"settingId": "guest_checkout", "value": "no"}]
    assert result.content == {"success": True, "message": "Updated", "previous": "yes"}
    assert result.is_error is False
    assert result.tool_call_id == "call_1"
    assert audit.kinds() == ["tool.started", "tool.succeeded"]
    assert audit.events[0][1] == {
        "name": "update_setting",
        "arguments": {"settingId": "guest_checkout", "value": "no"},
    }


def test_unknown_tool_is_an_error_result(registry, audit):
    result = registry.execute("delete_everything", {}, "call_9")

    assert result.is_error
    assert isinstance(result.error, InvalidTool)
    assert result.content == {"success": False, "message": 'Error: Tool "delete_everything" not found.'}
    assert audit.kinds() == ["tool.started", "tool.failed"]


def test_uncallable_callback_is_an_error_result(registry, audit):
    registry.register("broken", callback="not a function")

    result = registry.execute("broken")

    assert isinstance(result.error, InvalidCallback)
    assert audit.events[-1] == ("tool.failed", {
        "name": "broken",
        "error": "InvalidCallback",
        "message": 'Tool "broken" has no valid callback.',
    })


def test_callback_exception_is_captured(registry, audit):
    def explode(args):
        raise RuntimeError("inventory service unavailable")

    registry.register("get_stock", callback=explode)

    result = registry.execute("get_stock", {"sku": "A1"})

    assert isinstance(result.error, ToolExecutionError)
    assert result.error.name == "get_stock"
    assert result.content["message"] == "Error: inventory service unavailable"
    assert audit.kinds() == ["tool.started", "tool.failed"]


def test_result_message_for_replay(registry):
    registry.register("count", callback=lambda args: {"success": True, "count": 3})
    registry.register("greet", callback=lambda args: "hello")

    message = registry.execute("count", tool_call_id="c1").as_message()

    assert message.role == "tool"
    assert message.tool_call_id == "c1"
    assert message.name == "count"
    assert json.loads(message.content) == {"success": True, "count": 3}
    assert registry.execute("greet").text() == "hello"


def test_specs_follow_registration_order(registry):
    for name in ("a", "b", "c"):
        registry.register(name, callback=lambda args: None)

    assert [s.name for s in registry.specs()] == ["a", "b", "c"]
