"""Centralized table output for CLI commands.

Wraps Rich's Table so every kdbg table wraps long pod names instead of
truncating them.
"""

from __future__ import annotations

from typing import Any

from rich.table import Table as RichTable


class Table(RichTable):
    """Rich Table that folds overflowing cells by default.

    Usage:
        from kdbg.cli.output import Table

        table = Table(title="Pods")
        table.add_column("Name")  # Wraps long names
        table.add_column("Status", no_wrap=True)
        table.add_row("billing-worker-abc123", "Running")
    """

    def add_column(self, *args: Any, **kwargs: Any) -> None:
        """Add a column, defaulting ``overflow`` to ``"fold"``.

        Accepts the same arguments as :meth:`rich.table.Table.add_column`.
        """
        kwargs.setdefault("overflow", "fold")
        super().add_column(*args, **kwargs)
