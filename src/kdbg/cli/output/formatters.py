"""Output formatters for pod listings.

Implements the Strategy pattern for output formatting, so ``kdbg list``
can print a Rich table, JSON, or YAML from the same inventory snapshot.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import StrEnum

import yaml
from rich.console import Console

from kdbg.cli.output.table import Table
from kdbg.integrations.kubectl.models import PodRecord, PodStatus, format_age

STATUS_STYLES: dict[PodStatus, str] = {
    PodStatus.RUNNING: "green",
    PodStatus.PENDING: "yellow",
    PodStatus.FAILED: "red",
    PodStatus.SUCCEEDED: "blue",
}


class OutputFormat(StrEnum):
    """Supported output formats for pod listings."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


def status_markup(status: PodStatus) -> str:
    """Return the pod status wrapped in its Rich color."""
    style = STATUS_STYLES.get(status)
    if style is None:
        return str(status)
    return f"[{style}]{status}[/{style}]"


class PodFormatter(ABC):
    """Abstract base class for pod list formatters."""

    def __init__(self, console: Console) -> None:
        self.console = console

    @abstractmethod
    def format_pods(self, pods: Sequence[PodRecord], *, verbose: bool = False) -> None:
        """Format and display a list of pods."""


class TableFormatter(PodFormatter):
    """Rich table output formatter."""

    def format_pods(self, pods: Sequence[PodRecord], *, verbose: bool = False) -> None:
        table = Table(title="Pods", show_header=True)
        table.add_column("Name", style="cyan")
        table.add_column("Namespace", style="bright_black")
        table.add_column("Status", no_wrap=True)
        if verbose:
            table.add_column("Restarts", justify="right", no_wrap=True)
            table.add_column("Age", justify="right", no_wrap=True)

        for pod in pods:
            row = [pod.name, pod.namespace, status_markup(pod.status)]
            if verbose:
                row.extend([str(pod.restart_count), format_age(pod.age_seconds)])
            table.add_row(*row)

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {len(pods)} pods[/dim]")


class JsonFormatter(PodFormatter):
    """JSON output formatter."""

    def format_pods(self, pods: Sequence[PodRecord], *, verbose: bool = False) -> None:
        data = [pod.to_dict() for pod in pods]
        self.console.out(json.dumps({"data": data, "total": len(data)}, indent=2))


class YamlFormatter(PodFormatter):
    """YAML output formatter."""

    def format_pods(self, pods: Sequence[PodRecord], *, verbose: bool = False) -> None:
        data = [pod.to_dict() for pod in pods]
        self.console.out(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


def get_formatter(format_type: OutputFormat, console: Console | None = None) -> PodFormatter:
    """Factory function to get the appropriate formatter."""
    if console is None:
        console = Console()

    formatters: dict[OutputFormat, type[PodFormatter]] = {
        OutputFormat.TABLE: TableFormatter,
        OutputFormat.JSON: JsonFormatter,
        OutputFormat.YAML: YamlFormatter,
    }

    formatter_class = formatters.get(format_type, TableFormatter)
    return formatter_class(console)
