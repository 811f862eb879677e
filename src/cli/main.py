"""Typer entry point.

`clippy-clippy` reads the clipboard image, asks the configured vision model
for a transcription and prints it. Exit codes: 0 success, 3 first-run
bootstrap, 1 any other failure (2 stays with Typer usage errors).
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from adapters.clipboard import build_clipboard_source
from adapters.image_encoder import encode
from adapters.vision_client import build_vision_client
from cli.ui_components import emit_transcription, print_bootstrap_notice, print_error
from core.config import APP_NAME, resolve_settings
from core.domain.output_mode import OutputMode
from core.errors import ClippyError, ConfigFirstRunBootstrap
from core.services.transcription_pipeline import TranscriptionPipeline

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "CLIPPY_LOG_LEVEL"

app = typer.Typer(
    add_completion=False,
    help="Transcribe the text in the clipboard image with an OpenAI-compatible vision model.",
)

_console = Console(highlight=False)
_err_console = Console(stderr=True, highlight=False)


def _version() -> str:
    try:
        return package_version(APP_NAME)
    except PackageNotFoundError:
        return "0.0.0+local"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{APP_NAME} {_version()}")
        raise typer.Exit()


def configure_logging(verbosity: int) -> None:
    """Log to stderr; WARNING by default, -v INFO, -vv DEBUG."""

    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV, "WARNING").upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
    # Request dumps carry the whole base64 image.
    for noisy in ("openai", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(max(level, logging.INFO))


@app.command()
def transcribe(
    markdown: Annotated[
        bool, typer.Option("--markdown", "-m", help="Generate GitHub Flavored Markdown output (e.g. for tables).")
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", dir_okay=False, help="Path to the configuration file."),
    ] = None,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Increase log output on stderr (-v, -vv).")
    ] = 0,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    """Transcribe the image currently on the clipboard."""

    configure_logging(verbose)

    try:
        settings = resolve_settings(config)
    except ConfigFirstRunBootstrap as exc:
        print_bootstrap_notice(_console, exc.path)
        raise typer.Exit(code=exc.exit_code) from exc
    except ClippyError as exc:
        print_error(_err_console, exc)
        raise typer.Exit(code=exc.exit_code) from exc

    pipeline = TranscriptionPipeline(
        settings=settings,
        clipboard=build_clipboard_source(),
        encoder=encode,
        client=build_vision_client(settings),
    )
    mode = OutputMode.from_bool(markdown)

    try:
        response = asyncio.run(pipeline.run(mode))
    except ClippyError as exc:
        logger.debug("Transcription failed", exc_info=True)
        print_error(_err_console, exc)
        raise typer.Exit(code=exc.exit_code) from exc

    emit_transcription(response.text)


def run() -> None:
    # Windows terminals default to cp1252; the transcription may hold any Unicode.
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app()
