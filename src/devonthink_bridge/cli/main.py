"""devonthink-bridge CLI - drive DEVONthink through JXA tools."""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from devonthink_bridge.config import settings
from devonthink_bridge.errors import BridgeError
from devonthink_bridge.jxa.executor import JXAExecutor
from devonthink_bridge.tools import ToolRegistry
from devonthink_bridge.types import RawScriptResult

app = typer.Typer(
    name="devonthink-bridge",
    help="Run DEVONthink operations through osascript",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log bridge activity"),
) -> None:
    """Configure logging for every command."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s %(message)s")


def _print_payload(payload: dict) -> None:
    console.print_json(json.dumps(payload))


@app.command("tools")
def list_tools() -> None:
    """List available tools."""
    registry = ToolRegistry()

    table = Table(title="DEVONthink Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")

    for tool in registry.get_definitions():
        table.add_row(tool.name, tool.description)

    console.print(table)


@app.command("schema")
def show_schema(
    name: str = typer.Argument(..., help="Tool name"),
) -> None:
    """Show the JSON schema of a tool's arguments."""
    registry = ToolRegistry()
    tool = registry.get_definition(name)
    if tool is None:
        console.print(f"[red]Unknown tool '{name}'.[/red]")
        raise typer.Exit(1)
    _print_payload(tool.input_schema())


@app.command("call")
def call_tool(
    name: str = typer.Argument(..., help="Tool name"),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as a JSON object"),
    timeout: float = typer.Option(None, help="Host timeout in seconds"),
) -> None:
    """Call a tool and print its result payload."""
    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as e:
        console.print(f"[red]--args is not valid JSON: {e.msg}[/red]")
        raise typer.Exit(1)
    if not isinstance(arguments, dict):
        console.print("[red]--args must be a JSON object.[/red]")
        raise typer.Exit(1)

    registry = ToolRegistry()
    result = asyncio.run(registry.call(name, arguments, timeout=timeout))
    _print_payload(result.to_payload())
    if not result.success:
        raise typer.Exit(1)


@app.command("run")
def run_script(
    script_path: Path = typer.Argument(..., help="JXA file to run", exists=True, dir_okay=False),
    timeout: float = typer.Option(None, help="Host timeout in seconds"),
) -> None:
    """Run a JXA script file and print its decoded result payload."""
    executor = JXAExecutor()
    script = script_path.read_text(encoding="utf-8")
    try:
        result = asyncio.run(executor.execute(script, RawScriptResult, timeout=timeout))
    except BridgeError as e:
        console.print(f"[red]{e.error_type.value}: {e}[/red]")
        raise typer.Exit(1)

    _print_payload(result.to_payload())
    if not result.success:
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
