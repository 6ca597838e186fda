"""CLI entry point for store-agent."""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from storeagent.config import YamlConfigStore, chat_options_from_config
from storeagent.core import ToolLoop
from storeagent.display import Display
from storeagent.errors import StoreAgentError
from storeagent.http import HttpxClient
from storeagent.providers.base import Message
from storeagent.providers.factory import ProviderFactory
from storeagent.tools import ToolRegistry
from storeagent.usage import UsageLedger

console = Console()


class App:
    """Objects the commands share; built once per invocation."""

    def __init__(self, config_path: Path | None = None):
        self.store = YamlConfigStore(config_path)
        self.ledger = UsageLedger(self.store)
        self.factory = ProviderFactory(self.store, HttpxClient(), self.ledger)
        self.display = Display(console)


pass_app = click.make_pass_decorator(App)


@click.group()
@click.version_option(package_name="store-agent")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Config file (default: ~/.storeagent/config.yaml)")
@click.option("--verbose", "-v", is_flag=True, help="Log provider requests")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, verbose: bool):
    """Store operations assistant that works with several LLM vendors.

    Pick a vendor, store its API key, then chat; the model can call the
    tools your application registers.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.obj = App(config_path)


@main.command()
@pass_app
def providers(app: App):
    """List supported vendors and whether a key is stored."""
    selected = app.store.get("provider", "openai")
    table = Table(title="Providers", border_style="cyan")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Configured", justify="center")
    for p in app.factory.available_providers():
        marker = " *" if p["id"] == selected else ""
        table.add_row(p["id"] + marker, p["name"], "[green]yes[/green]" if p["configured"] else "[dim]no[/dim]")
    console.print(table)


@main.command()
@click.argument("provider_id", required=False)
@pass_app
def models(app: App, provider_id: str | None):
    """List known models for a vendor (default: the selected one)."""
    provider_id = provider_id or app.store.get("provider", "openai")
    try:
        provider = app.factory.create(provider_id)
    except StoreAgentError as e:
        app.display.failure(e)
        sys.exit(1)

    table = Table(title=f"{provider.name} Models", border_style="cyan")
    table.add_column("Model ID", style="bold")
    table.add_column("Name")
    table.add_column("Context", justify="right")
    table.add_column("Description")
    for m in provider.available_models().values():
        marker = " (default)" if m.id == provider.default_model else ""
        table.add_row(m.id + marker, m.name, f"{m.context_window:,}", m.description)
    console.print(table)


@main.command("set-key")
@click.argument("provider_id")
@click.argument("api_key")
@pass_app
def set_key(app: App, provider_id: str, api_key: str):
    """Store an API key for a vendor."""
    try:
        app.factory.save_credential(provider_id, api_key)
    except StoreAgentError as e:
        app.display.failure(e)
        sys.exit(1)
    console.print(f"[green]Saved API key for {provider_id}.[/green]")


@main.command()
@click.argument("provider_id")
@click.option("--model", "-m", default=None, help="Model id (default: the vendor's default)")
@pass_app
def use(app: App, provider_id: str, model: str | None):
    """Select the vendor (and optionally the model) used for chat."""
    if provider_id not in app.factory.provider_ids:
        console.print(f"[red]Invalid AI provider: {provider_id}[/red]")
        sys.exit(1)
    app.store.set("provider", provider_id)
    app.store.set("model", model)
    console.print(f"Using [green]{provider_id}[/green]" + (f" with [yellow]{model}[/yellow]" if model else ""))


@main.command()
@click.argument("provider_id", required=False)
@pass_app
def validate(app: App, provider_id: str | None):
    """Check that the stored key for a vendor works."""
    provider_id = provider_id or app.store.get("provider", "openai")
    try:
        app.factory.validate_credential(provider_id)
    except StoreAgentError as e:
        app.display.failure(e)
        sys.exit(1)
    console.print(f"[green]{provider_id}: API key is valid.[/green]")


@main.command()
@click.option("--provider", "provider_id", default=None, help="Only this vendor")
@pass_app
def usage(app: App, provider_id: str | None):
    """Show token usage per vendor and day."""
    ids = [provider_id] if provider_id else app.ledger.providers()
    rows = {p: app.ledger.for_provider(p) for p in ids}
    if not any(rows.values()):
        console.print("[dim]No usage recorded yet.[/dim]")
        return
    app.display.usage(rows)


@main.command()
@click.argument("message")
@click.option("--tools", "tools_module", default=None,
              help="Module exposing register_tools(registry)")
@click.option("--system", "system_prompt", default=None, help="System prompt")
@click.option("--yes", "-y", "authorize", is_flag=True, help="Allow destructive tools")
@pass_app
def chat(app: App, message: str, tools_module: str | None, system_prompt: str | None, authorize: bool):
    """Send one message through the tool loop.

    \b
    Examples:
      store-agent chat "How many orders are pending?"
      store-agent chat "Disable guest checkout" --tools myshop.tools
    """
    registry = ToolRegistry()
    if tools_module:
        try:
            module = importlib.import_module(tools_module)
        except ImportError as e:
            console.print(f"[red]Cannot import {tools_module}: {e}[/red]")
            sys.exit(1)
        register = getattr(module, "register_tools", None)
        if not callable(register):
            console.print(f"[red]{tools_module} has no register_tools(registry) function.[/red]")
            sys.exit(1)
        register(registry)

    try:
        provider = app.factory.get_configured_provider()
    except StoreAgentError as e:
        app.display.failure(e)
        sys.exit(1)

    app.display.banner(provider.name, provider.model)
    loop = ToolLoop(
        provider,
        registry,
        max_iterations=int(app.store.get("max_iterations", 5)),
        display=app.display,
    )
    options = chat_options_from_config(app.store, system_prompt=system_prompt)
    result = loop.run([Message.user(message)], options, authorize_destructive=authorize)
    app.display.turn(result)
    if result.status == "error":
        sys.exit(1)
