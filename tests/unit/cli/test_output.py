"""Tests for the pod list formatters."""

from __future__ import annotations

import json
from collections.abc import Callable

import pytest
import yaml
from rich.console import Console

from kdbg.cli.output import OutputFormat, get_formatter, status_markup
from kdbg.cli.output.formatters import JsonFormatter, TableFormatter, YamlFormatter
from kdbg.integrations.kubectl.models import PodRecord, PodStatus


def _console() -> Console:
    return Console(width=120, record=True, color_system=None)


@pytest.mark.unit
class TestStatusMarkup:
    """Tests for status_markup."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (PodStatus.RUNNING, "[green]Running[/green]"),
            (PodStatus.PENDING, "[yellow]Pending[/yellow]"),
            (PodStatus.FAILED, "[red]Failed[/red]"),
            (PodStatus.SUCCEEDED, "[blue]Succeeded[/blue]"),
        ],
    )
    def test_known_status_colors(self, status: PodStatus, expected: str) -> None:
        assert status_markup(status) == expected

    def test_unknown_status_is_plain(self) -> None:
        assert status_markup(PodStatus.UNKNOWN) == "Unknown"


@pytest.mark.unit
class TestGetFormatter:
    """Tests for the formatter factory."""

    @pytest.mark.parametrize(
        ("fmt", "cls"),
        [
            (OutputFormat.TABLE, TableFormatter),
            (OutputFormat.JSON, JsonFormatter),
            (OutputFormat.YAML, YamlFormatter),
        ],
    )
    def test_returns_matching_formatter(self, fmt: OutputFormat, cls: type) -> None:
        assert isinstance(get_formatter(fmt, _console()), cls)

    def test_creates_console_when_missing(self) -> None:
        assert get_formatter(OutputFormat.JSON).console is not None


@pytest.mark.unit
class TestFormatters:
    """Tests for the rendered output."""

    def test_table_basic_columns(self, sample_pods: list[PodRecord]) -> None:
        console = _console()

        TableFormatter(console).format_pods(sample_pods)
        text = console.export_text()

        assert "my-app-deployment-7d4f8c9b5-xk2lp" in text
        assert "payments" in text
        assert "Restarts" not in text
        assert "Total: 3 pods" in text

    def test_table_verbose_adds_restarts_and_age(
        self, make_pod: Callable[..., PodRecord]
    ) -> None:
        console = _console()
        pod = make_pod("api-1", restart_count=4, age_seconds=7200)

        TableFormatter(console).format_pods([pod], verbose=True)
        text = console.export_text()

        assert "Restarts" in text
        assert "Age" in text
        assert "2h" in text

    def test_json(self, sample_pods: list[PodRecord]) -> None:
        console = _console()

        JsonFormatter(console).format_pods(sample_pods)
        payload = json.loads(console.export_text())

        assert payload["total"] == 3
        assert payload["data"][0] == sample_pods[0].to_dict()

    def test_yaml(self, sample_pods: list[PodRecord]) -> None:
        console = _console()

        YamlFormatter(console).format_pods(sample_pods)
        data = yaml.safe_load(console.export_text())

        assert [item["name"] for item in data] == [pod.name for pod in sample_pods]
        assert data[2]["status"] == "Running"

    def test_json_empty(self) -> None:
        console = _console()

        JsonFormatter(console).format_pods([])

        assert json.loads(console.export_text()) == {"data": [], "total": 0}
