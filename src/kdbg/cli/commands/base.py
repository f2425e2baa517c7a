"""Base utilities for kdbg CLI commands.

Provides common Typer options, namespace scoping, and the single error
handler that maps kdbg failures to messages and exit codes.
"""

from __future__ import annotations

from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from kdbg.cli.output import OutputFormat
from kdbg.core.exceptions import (
    ClusterUnreachableError,
    ExecutionInterruptedError,
    InvalidOptionError,
    KdbgError,
    NonZeroExitError,
    PodNotFoundError,
    SelectionCancelledError,
    ToolUnavailableError,
)
from kdbg.integrations.kubectl.models import ALL_NAMESPACES

# Command output goes to stdout; messages, banners, and errors to stderr
console = Console()
err_console = Console(stderr=True)


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

PodArgument = Annotated[
    str,
    typer.Argument(help="Pod name or fragment of it (e.g. 'billing')"),
]

OutputOption = Annotated[
    OutputFormat,
    typer.Option(
        "--output",
        "-o",
        help="Output format: table, json, or yaml",
        case_sensitive=False,
    ),
]

NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Kubernetes namespace (defaults to config, else all namespaces)",
    ),
]

AllNamespacesOption = Annotated[
    bool,
    typer.Option(
        "--all-namespaces",
        "-A",
        help="Search pods across all namespaces",
    ),
]

ContainerOption = Annotated[
    str | None,
    typer.Option("--container", "-C", help="Container name"),
]


def scope_namespace(
    namespace: str | None,
    all_namespaces: bool = False,
    default: str | None = None,
) -> str:
    """Pick the namespace scope for a lookup.

    ``-A`` wins, then an explicit ``-n``, then the configured default.
    Without any of them pods are searched in all namespaces.
    """
    if all_namespaces:
        return ALL_NAMESPACES
    if namespace is not None:
        return namespace
    return default or ALL_NAMESPACES


def describe_scope(namespace: str | None) -> str:
    """Human-readable form of a namespace scope."""
    if not namespace or namespace == ALL_NAMESPACES:
        return "all namespaces"
    return f"namespace '{namespace}'"


# =============================================================================
# Error Handling
# =============================================================================


def handle_kdbg_error(error: KdbgError) -> NoReturn:
    """Handle kdbg errors with user-friendly output.

    Args:
        error: The error to report.

    Raises:
        typer.Exit: Always, with the error's exit code.
    """
    if isinstance(error, ExecutionInterruptedError):
        err_console.print("\n[dim]Interrupted.[/dim]")

    elif isinstance(error, ToolUnavailableError):
        err_console.print("[red]Error:[/red] kubectl is not available")
        err_console.print(f"  {escape(error.message)}")
        err_console.print(
            "\n[dim]Hint: Put kubectl on PATH or set kubectl_path / KDBG_KUBECTL.[/dim]"
        )

    elif isinstance(error, ClusterUnreachableError):
        err_console.print("[red]Error:[/red] Cannot reach Kubernetes cluster")
        err_console.print(f"  {escape(error.message)}")
        if error.namespace:
            err_console.print(f"  Scope: {escape(describe_scope(error.namespace))}")
        err_console.print(
            "\n[dim]Hint: Check that your kubeconfig is valid and the cluster is reachable.[/dim]"
        )

    elif isinstance(error, PodNotFoundError):
        err_console.print(f"[red]Error:[/red] {escape(error.message)}")
        err_console.print(f"  Searched: {escape(describe_scope(error.namespace))}")
        err_console.print("\n[dim]Hint: Run 'kdbg list' to see the available pods.[/dim]")

    elif isinstance(error, SelectionCancelledError):
        err_console.print(f"[yellow]{escape(error.message)}[/yellow]")

    elif isinstance(error, InvalidOptionError):
        err_console.print("[red]Error:[/red] Invalid option")
        err_console.print(f"  {escape(error.message)}")

    elif isinstance(error, NonZeroExitError):
        err_console.print(f"[red]Error:[/red] {escape(error.message)}")

    else:
        err_console.print(f"[red]Error:[/red] {escape(str(error))}")

    raise typer.Exit(error.exit_code)
