"""CLI presentation helpers (Rich).

Standard output carries only the transcription, or the setup instructions
on first run. Everything diagnostic goes to standard error.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from core.config import ENV_PREFIX
from core.errors import ApiRejected, ClippyError, ConfigInvalid, NoImagePresent


def emit_transcription(text: str) -> None:
    """Write the transcription plus a trailing newline to stdout, unchanged."""

    typer.echo(text)


def print_bootstrap_notice(console: Console, path: Path) -> None:
    """First-run instructions after the default config was written."""

    body = Text()
    body.append("A default configuration file was created at:\n")
    body.append(f"{path}\n\n", style="bold")
    body.append("Edit it with your API details before running again:\n")
    body.append("- endpoint: base URL of an OpenAI-compatible API\n")
    body.append("- api_key: your API key\n")
    body.append("- model: a vision-capable model\n\n")
    body.append(f"Any value can also be set through {ENV_PREFIX}<FIELD> environment variables.", style="dim")
    console.print(Panel(body, title=Text("clippy-clippy setup", style="bold cyan"), border_style="cyan"))


def print_error(console: Console, error: ClippyError) -> None:
    """Human-readable failure line on stderr."""

    if isinstance(error, NoImagePresent):
        console.print(Text(f"📋 {error.message}", style="yellow"))
        return

    console.print(Text.assemble(("Error: ", "bold red"), error.message))
    if isinstance(error, ApiRejected) and error.status_code in (401, 403):
        console.print(Text("Check the api_key (and endpoint) in your configuration.", style="dim"))
    elif isinstance(error, ConfigInvalid):
        console.print(Text("Fix the configuration file and run again.", style="dim"))
