"""CLI application for the IPCRAE vault using Rich and Typer.

Runs the plugin in-process against a local host, so every command behaves
exactly like its chat counterpart.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from ipcrae.core.config import (
    env_config_mapping,
    read_config_mapping,
    resolve_local_path,
    setup_logging,
)
from ipcrae.core.errors import ConfigError
from ipcrae.core.types import CommandContext
from ipcrae.interfaces.host.plugin import Command, EventHandler, IPCRAEPlugin

app = typer.Typer(
    name="ipcrae",
    help="IPCRAE vault CLI - status, capture, promotion and project sync",
    no_args_is_help=True,
)

console = Console()


class LocalHost:
    """Minimal in-process host: collects commands and event hooks."""

    def __init__(self, plugin_config: dict):
        self.plugin_config = plugin_config
        self.logger = logging.getLogger("ipcrae.cli")
        self.commands: dict[str, Command] = {}
        self.events: dict[str, EventHandler] = {}

    def resolve_path(self, value: str) -> str:
        return resolve_local_path(value)

    def on(self, event: str, handler: EventHandler) -> None:
        self.events[event] = handler

    def register_command(self, command: Command) -> None:
        self.commands[command.name] = command


_state: dict = {"root": None, "config": None}


@app.callback()
def main(
    root: Optional[Path] = typer.Option(
        None, "--root", "-r", help="Vault root (overrides config and IPCRAE_ROOT)"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML file with plugin configuration"
    ),
):
    """Select the vault and configuration."""
    setup_logging()
    _state["root"] = root
    _state["config"] = config


def build_host() -> tuple[LocalHost, IPCRAEPlugin]:
    """Register the plugin with a local host built from CLI options."""
    try:
        raw = read_config_mapping(_state["config"]) if _state["config"] else {}
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    mapping = {k: v for k, v in env_config_mapping().items() if v is not None}
    mapping.update(raw)
    if _state["root"] is not None:
        mapping["ipcraeRoot"] = str(_state["root"])

    host = LocalHost(mapping)
    plugin = IPCRAEPlugin()
    plugin.register(host)
    return host, plugin


def run_command(name: str, args: str | None = None) -> str:
    host, _ = build_host()
    ctx = CommandContext(args=args, channel="cli", sender_id=os.getenv("USER", "local"))
    result = asyncio.run(host.commands[name].handler(ctx))
    return result.text


@app.command()
def status():
    """Show vault status, CDE mode and next fixes."""
    text = run_command("ipcrae-status")
    degraded = "cdeMode: degraded" in text
    console.print(
        Panel(
            Text(text),
            title="IPCRAE",
            border_style="yellow" if degraded else "green",
        )
    )


@app.command()
def context():
    """Print the prompt context assembled from the vault."""
    _, plugin = build_host()
    result = asyncio.run(plugin.before_prompt_build())
    if not result:
        console.print("[dim]No context (missing .ipcrae/context.md?)[/dim]")
        return
    console.print(Markdown(result["prepend_context"]))


@app.command()
def capture(text: str = typer.Argument(..., help="Text to capture")):
    """Capture text into Inbox/idees."""
    console.print(Text(run_command("capture", text)))


@app.command("capture-local")
def capture_local(text: str = typer.Argument(..., help="Note text")):
    """Save a volatile local note (works in degraded mode)."""
    console.print(Text(run_command("capture-local", text)))


@app.command()
def promote(path: str = typer.Argument(..., help="Local note path")):
    """Promote a local note into stable Knowledge."""
    console.print(Text(run_command("promote-note", path)))


@app.command()
def sync(action: Optional[str] = typer.Argument(None, help="Next action text")):
    """Sync the active project's index, tracking and memory files."""
    console.print(Text(run_command("ipcrae-sync", action)))


if __name__ == "__main__":
    app()
