"""Main CLI implementation using Typer."""

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from rich.console import Console
from rich.markup import escape

from shaper.cli.commands import render_boot_script, show_bootstrap, show_content, validate_config
from shaper.errors import ShaperError
from shaper.service import ShaperService
from shaper.utils.logging import setup_logging


# Create Typer app
app = typer.Typer(
    name="shaperctl",
    help="Shaper - iPXE boot profile resolution",
    add_completion=False,
)

# Console for rich output
console = Console()


def _config_dir_option():
    return typer.Option(Path("./configs"), "--config-dir", "-c", help="Configuration directory")


def _log_level_option():
    return typer.Option("WARNING", "--log-level", help="Log level written to stderr")


async def _invoke(handler: Callable[..., Any], config_dir: Path, **kwargs: Any):
    service = await ShaperService.from_config_dir(config_dir)
    await handler(service, **kwargs)


def _run_cli_command(handler: Callable[..., Any], config_dir: Path, log_level: str = "WARNING", **kwargs: Any):
    """Helper to run a CLI command against a loaded service with error handling."""
    setup_logging(log_level)
    try:
        asyncio.run(_invoke(handler, config_dir, **kwargs))
    except ShaperError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1) from e


@app.command("render")
def render_command(
    uuid: Optional[str] = typer.Option(None, "--uuid", "-u", help="Machine UUID"),
    buildarch: str = typer.Option("", "--buildarch", "-a", help="iPXE build architecture"),
    config_dir: Path = _config_dir_option(),
    log_level: str = _log_level_option(),
):
    """Render the iPXE script selected for a machine."""
    _run_cli_command(render_boot_script, config_dir, log_level, uuid=uuid, buildarch=buildarch)


@app.command("content")
def content_command(
    content_id: str = typer.Argument(..., help="Exposed content ID"),
    uuid: Optional[str] = typer.Option(None, "--uuid", "-u", help="Machine UUID"),
    buildarch: str = typer.Option("", "--buildarch", "-a", help="iPXE build architecture"),
    config_dir: Path = _config_dir_option(),
    log_level: str = _log_level_option(),
):
    """Resolve and print exposed content."""
    _run_cli_command(show_content, config_dir, log_level, content_id=content_id, uuid=uuid, buildarch=buildarch)


@app.command("bootstrap")
def bootstrap_command(
    config_dir: Path = _config_dir_option(),
    log_level: str = _log_level_option(),
):
    """Print the iPXE bootstrap script."""
    _run_cli_command(show_bootstrap, config_dir, log_level)


@app.command("validate")
def validate_command(
    config_dir: Path = _config_dir_option(),
    log_level: str = _log_level_option(),
):
    """Validate configuration files."""
    _run_cli_command(validate_config, config_dir, log_level)


def main():
    """Main entry point for CLI."""
    app()
