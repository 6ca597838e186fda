"""Rich terminal display for store-agent conversations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from storeagent.core import TurnResult
    from storeagent.errors import StoreAgentError
    from storeagent.providers.base import ToolCall
    from storeagent.usage import UsageEntry

console = Console()


class Display:
    """Handles all terminal output with rich formatting."""

    def __init__(self, out: Console | None = None):
        self.console = out or console

    def banner(self, provider: str, model: str):
        self.console.print(
            f"  Provider: [green]{provider}[/green]  Model: [yellow]{model}[/yellow]"
        )

    def assistant_message(self, content: str):
        if content.strip():
            self.console.print(Panel(Markdown(content), title="Assistant", border_style="blue"))

    def tool_call(self, name: str, args: dict):
        args_str = ", ".join(f"{k}={_truncate(str(v), 60)}" for k, v in args.items())
        self.console.print(f"  [dim]-> {name}({args_str})[/dim]")

    def tool_result(self, name: str, result: str):
        truncated = _truncate(result, 200)
        self.console.print(f"  [dim]<- {name}: {truncated}[/dim]")

    def confirmation_required(self, calls: list[ToolCall]):
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(style="bold yellow")
        table.add_column()
        for tc in calls:
            table.add_row(tc.name, _truncate(tc.arguments, 100))
        self.console.print(Panel(
            table,
            title="[bold yellow]Confirmation required[/bold yellow]",
            subtitle="re-run with --yes to allow these actions",
            border_style="yellow",
        ))

    def turn(self, result: TurnResult):
        if result.status == "confirmation_required":
            self.confirmation_required(result.pending_calls)
        elif result.status == "error":
            self.error(result.content)
        else:
            self.assistant_message(result.content)
        u = result.usage
        self.console.print(
            f"  [dim]Tokens: {u.prompt_tokens:,} in / {u.completion_tokens:,} out"
            f"  Tool calls: {len(result.tool_results)}[/dim]"
        )

    def error(self, msg: str):
        self.console.print(f"  [bold red]Error:[/bold red] {msg}")

    def failure(self, exc: StoreAgentError):
        self.error(exc.message)
        if exc.hint:
            self.console.print(f"  [dim]{exc.hint}[/dim]")

    def usage(self, rows: dict[str, dict[str, UsageEntry]]):
        table = Table(title="API Usage", border_style="cyan")
        table.add_column("Provider", style="bold")
        table.add_column("Day")
        table.add_column("Requests", justify="right")
        table.add_column("Prompt", justify="right")
        table.add_column("Completion", justify="right")
        table.add_column("Total", justify="right", style="green")
        for provider, days in rows.items():
            for day, e in days.items():
                table.add_row(
                    provider, day, f"{e.requests:,}", f"{e.prompt_tokens:,}",
                    f"{e.completion_tokens:,}", f"{e.total_tokens:,}",
                )
        self.console.print(table)


def _truncate(s: str, max_len: int) -> str:
    s = s.replace("\n", "\\n")
    if len(s) > max_len:
        return s[:max_len] + "..."
    return s
