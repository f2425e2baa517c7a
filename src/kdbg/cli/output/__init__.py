"""Centralized CLI output utilities.

Usage:
    from kdbg.cli.output import OutputFormat, Table, get_formatter

    get_formatter(OutputFormat.JSON, console).format_pods(pods)
"""

from kdbg.cli.output.formatters import (
    OutputFormat,
    PodFormatter,
    get_formatter,
    status_markup,
)
from kdbg.cli.output.table import Table

__all__ = ["OutputFormat", "PodFormatter", "Table", "get_formatter", "status_markup"]
