"""Tests for cli/output/table.py."""

from __future__ import annotations

import pytest
from rich.console import Console
from rich.table import Column

from kdbg.cli.output.table import Table


@pytest.mark.unit
class TestTableDefaults:
    """Tests that Table applies fold overflow and delegates to RichTable."""

    def test_add_column_uses_fold_overflow_by_default(self) -> None:
        table = Table()
        table.add_column("Name")
        col: Column = table.columns[0]
        assert col.overflow == "fold"

    def test_add_column_respects_explicit_overflow(self) -> None:
        """Caller can override the default overflow value."""
        table = Table()
        table.add_column("ID", overflow="ellipsis")
        assert table.columns[0].overflow == "ellipsis"

    def test_add_column_passes_other_options(self) -> None:
        table = Table()
        table.add_column("Restarts", justify="right", no_wrap=True, style="cyan")
        col = table.columns[0]
        assert col.justify == "right"
        assert col.no_wrap is True
        assert col.style == "cyan"

    def test_long_pod_names_are_not_truncated(self) -> None:
        name = "my-app-deployment-7d4f8c9b5-" + "x" * 40
        table = Table(show_header=False)
        table.add_column("Name")
        table.add_row(name)

        console = Console(width=30, record=True, color_system=None)
        console.print(table)
        text = console.export_text()

        assert "…" not in text
        assert text.count("x") == 40
