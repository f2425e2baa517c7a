"""Main CLI entry point using Typer."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

import typer
from rich.markup import escape

from kdbg import __version__
from kdbg.cli.choosers import ConsoleChooser, NonInteractiveChooser
from kdbg.cli.commands import init, register_pod_commands
from kdbg.cli.commands.base import console, err_console
from kdbg.core.config import KdbgConfig, resolve_config
from kdbg.integrations.kubectl.client import KubectlClient
from kdbg.integrations.kubectl.executor import Executor
from kdbg.logging.config import configure_logging
from kdbg.services.command_builder import CommandBuilder
from kdbg.services.dispatcher import OperationDispatcher
from kdbg.services.selection import Chooser, SelectionArbiter

app = typer.Typer(
    name="kdbg",
    help="Kubernetes pod debugger: a fast kubectl wrapper with fuzzy pod matching.",
    add_completion=True,
    no_args_is_help=True,
)


@dataclass
class CliState:
    """Per-invocation settings established by the root callback."""

    no_input: bool = False
    config: KdbgConfig = field(default_factory=KdbgConfig)


state = CliState()


def get_config() -> KdbgConfig:
    """Return the effective configuration of this invocation."""
    return state.config


def _build_chooser() -> Chooser:
    if state.no_input or not sys.stdin.isatty():
        return NonInteractiveChooser(err_console)
    return ConsoleChooser(console)


def _notify(message: str) -> None:
    err_console.print(f"[cyan][INFO][/cyan] {escape(message)}")


def _warn(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def get_dispatcher() -> OperationDispatcher:
    """Build the dispatcher for this invocation.

    Raises:
        ToolUnavailableError: If kubectl cannot be found.
    """
    config = get_config()
    client = KubectlClient(config.kubectl_path, request_timeout=config.request_timeout)
    return OperationDispatcher(
        client,
        Executor(client.binary),
        SelectionArbiter(_build_chooser()),
        CommandBuilder(),
        config,
        notify=_notify,
        warn=_warn,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"kdbg version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    no_input: bool = typer.Option(
        False,
        "--no-input",
        help="Never prompt; fail when a fragment matches several pods.",
    ),
) -> None:
    """kdbg - find pods by fragment and debug them with kubectl."""
    try:
        config = resolve_config()
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] Invalid configuration\n{escape(str(e))}")
        raise typer.Exit(code=2) from e

    state.config = config
    state.no_input = no_input
    configure_logging(verbose=verbose, debug=debug, log_level=config.log_level)


# Register subcommands
app.add_typer(init.app, name="init")
register_pod_commands(app, get_dispatcher, get_config)


if __name__ == "__main__":
    app()
