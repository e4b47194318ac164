"""Rich-based rendering for tool listings, tool calls, results, and errors."""

import json
from typing import Any

from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from toolcaddy.dispatcher import Dispatcher
from toolcaddy.tools.registry import Tool

console = Console()

TOOL_BORDER = "cyan"
SUCCESS_BORDER = "green"
FAILURE_BORDER = "red"


def render_tools(tools: list[Tool]) -> None:
    """Render registered tools and their parameters as a table."""
    table = Table(title="Available Tools", border_style="dim")
    table.add_column("Tool", style="bold")
    table.add_column("Description")
    table.add_column("Parameters", style="dim")

    for tool in tools:
        params = "\n".join(
            f"{name}: {spec.type}{' (required)' if spec.required else ''}"
            + (f" = {spec.default!r}" if spec.default not in (None, "") else "")
            for name, spec in tool.parameters.items()
        )
        table.add_row(tool.name, tool.description, params or "-")

    console.print(table)


def render_tool_call(name: str, args: dict) -> None:
    """Render a styled tool invocation block."""
    args_text = "\n".join(f"  {k}: {v}" for k, v in args.items())
    content = Text.assemble(
        ("Tool: ", "bold"),
        (name, "bold cyan"),
        ("\n",),
        (args_text, "dim"),
    )
    console.print(Panel(content, border_style=TOOL_BORDER, title="Tool Call", title_align="left"))


def render_tool_result(result: dict[str, Any]) -> None:
    """Render a result envelope as JSON in a panel colored by outcome."""
    border = SUCCESS_BORDER if result.get("success") is True else FAILURE_BORDER
    body = JSON(json.dumps(result, default=str))
    console.print(Panel(body, border_style=border, title="Result", title_align="left"))


def render_capabilities(dispatcher: Dispatcher) -> None:
    console.print(f"  Screenshot capability: {dispatcher.has_screenshot_capability}")
    console.print(f"  Model switching capability: {dispatcher.has_model_switching_capability}")
    console.print(f"  Web search capability: {dispatcher.has_web_search_capability}")
    console.print(f"  Last tool used: {dispatcher.last_tool_used or '-'}")
    console.print(f"  Currently executing: {dispatcher.is_executing}")


def status_printer(dispatcher: Dispatcher):
    """Return a state listener that prints dispatch start and finish."""

    def _on_change() -> None:
        if dispatcher.is_executing:
            console.print(f"[dim]… running {dispatcher.last_tool_used}[/dim]")
        else:
            console.print(f"[dim]✓ {dispatcher.last_tool_used} finished[/dim]")

    return _on_change


def render_error(msg: str) -> None:
    """Render an error message in red."""
    console.print(f"[bold red]Error:[/bold red] {msg}")
