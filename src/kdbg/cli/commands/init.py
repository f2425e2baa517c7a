"""Init command for writing a default kdbg configuration."""

from __future__ import annotations

import structlog
import typer
from rich.markup import escape
from rich.panel import Panel

from kdbg.cli.commands.base import console, err_console
from kdbg.core.config.models import CONFIG_DIR, CONFIG_FILE, KdbgConfig

app = typer.Typer(help="Write a default kdbg configuration file.")
logger = structlog.get_logger()


@app.callback(invoke_without_command=True)
def init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration.",
    ),
) -> None:
    """Initialize kdbg configuration in ~/.config/kdbg/."""
    if ctx.invoked_subcommand is not None:
        return

    logger.info("initializing_config", path=str(CONFIG_FILE))

    if CONFIG_FILE.exists() and not force:
        err_console.print(f"[yellow]Configuration already exists at {CONFIG_FILE}[/yellow]")
        err_console.print("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        CONFIG_FILE.write_text(KdbgConfig().to_yaml())
    except OSError as e:
        err_console.print(f"[red]Error:[/red] Cannot write {CONFIG_FILE}: {escape(str(e))}")
        raise typer.Exit(code=1) from e

    console.print(
        Panel(
            f"[green]Configuration initialized successfully![/green]\n\n"
            f"Configuration created at: {CONFIG_FILE}\n\n"
            f"Next steps:\n"
            f"  1. Set default_namespace or debug_image in {CONFIG_FILE}\n"
            f"  2. Run [bold]kdbg list[/bold] to check cluster access",
            title="kdbg init",
            border_style="green",
        )
    )

    logger.info("config_initialized", config_file=str(CONFIG_FILE))
