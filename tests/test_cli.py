"""Tests for the store-agent command line."""

from __future__ import annotations

import textwrap

import pytest
import yaml
from click.testing import CliRunner
from rich.console import Console

from storeagent import cli
from storeagent.http import HttpResponse


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.yaml"


@pytest.fixture
def run(config_path, http, monkeypatch):
    """Invoke the CLI against a temp config file and the fake transport."""
    monkeypatch.setattr(cli, "HttpxClient", lambda: http)
    monkeypatch.setattr(cli, "console", Console(width=200))
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(cli.main, ["--config", str(config_path), *args])

    return invoke


@pytest.fixture
def shop_tools(tmp_path, monkeypatch):
    """An importable module exposing register_tools(registry)."""
    (tmp_path / "shop_tools.py").write_text(textwrap.dedent('''
        def register_tools(registry):
            @registry.register("update_setting", parameters={"type": "object"})
            def update_setting(args):
                """Change a store setting."""
                return {"success": True, "message": "Setting updated"}

            @registry.register("delete_product", destructive=True)
            def delete_product(args):
                """Delete a product."""
                raise AssertionError("must not run without --yes")
    '''))
    monkeypatch.syspath_prepend(str(tmp_path))
    return "shop_tools"


def openai_reply(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}],
            "usage": {"prompt_tokens": 9, "completion_tokens": 3, "total_tokens": 12}}


def openai_call(name, arguments):
    return {"choices": [{"message": {"role": "assistant", "content": None, "tool_calls": [
        {"id": "call_1", "type": "function", "function": {"name": name, "arguments": arguments}},
    ]}}]}


def test_providers_lists_all_vendors(run):
    result = run("providers")

    assert result.exit_code == 0
    for name in ("OpenAI", "Anthropic", "Google Gemini", "xAI Grok", "DeepSeek"):
        assert name in result.output


def test_models_for_vendor(run):
    result = run("models", "anthropic")

    assert result.exit_code == 0
    assert "claude-3-5-haiku-20241022" in result.output
    assert "claude-3-5-sonnet-20241022 (default)" in result.output


def test_models_for_unknown_vendor(run):
    result = run("models", "mistral")

    assert result.exit_code == 1
    assert "Invalid AI provider: mistral" in result.output


def test_set_key_stores_obfuscated_value(run, config_path):
    result = run("set-key", "openai", "sk-live-123")

    assert result.exit_code == 0
    stored = yaml.safe_load(config_path.read_text())
    assert stored["openai_api_key"]
    assert stored["openai_api_key"] != "sk-live-123"


def test_use_selects_provider_and_model(run, config_path):
    result = run("use", "google", "--model", "gemini-2.5-pro")

    assert result.exit_code == 0
    stored = yaml.safe_load(config_path.read_text())
    assert stored["provider"] == "google"
    assert stored["model"] == "gemini-2.5-pro"

    assert run("use", "nope").exit_code == 1


def test_validate_reports_vendor_error(run, http):
    run("set-key", "openai", "sk-bad")
    http.queue(HttpResponse(401, {"error": {"message": "Incorrect API key provided"}}))

    result = run("validate")

    assert result.exit_code == 1
    assert "Incorrect API key provided" in result.output


def test_validate_success(run, http):
    run("set-key", "openai", "sk-good")
    http.ok(openai_reply("Hi"))

    result = run("validate", "openai")

    assert result.exit_code == 0
    assert "API key is valid" in result.output


def test_chat_without_key(run):
    result = run("chat", "hello")

    assert result.exit_code == 1
    assert "not configured" in result.output
    assert "Traceback" not in result.output


def test_chat_with_tools(run, http, shop_tools):
    run("set-key", "openai", "sk-test")
    http.ok(openai_call("update_setting", '{"settingId": "guest_checkout", "value": "no"}'))
    http.ok(openai_reply("Guest checkout disabled."))

    result = run("chat", "disable guest checkout", "--tools", shop_tools)

    assert result.exit_code == 0, result.output
    assert "update_setting" in result.output
    assert "Guest checkout disabled." in result.output
    assert [t["function"]["name"] for t in http.requests[0].json_body["tools"]] == [
        "update_setting", "delete_product",
    ]


def test_chat_holds_destructive_tool(run, http, shop_tools):
    run("set-key", "openai", "sk-test")
    http.ok(openai_call("delete_product", '{"id": 5}'))

    result = run("chat", "delete product 5", "--tools", shop_tools)

    assert result.exit_code == 0, result.output
    assert "Confirmation required" in result.output
    assert len(http.requests) == 1


def test_chat_with_missing_tools_module(run):
    result = run("chat", "hi", "--tools", "no_such_module_here")

    assert result.exit_code == 1
    assert "Cannot import no_such_module_here" in result.output


def test_usage_after_chat(run, http):
    assert "No usage recorded yet." in run("usage").output

    run("set-key", "openai", "sk-test")
    http.ok(openai_reply("Hello"))
    run("chat", "hi", "--system", "Be brief")

    result = run("usage", "--provider", "openai")
    assert result.exit_code == 0
    assert "openai" in result.output
    assert "12" in result.output
    assert http.requests[0].json_body["messages"][0] == {"role": "system", "content": "Be brief"}
