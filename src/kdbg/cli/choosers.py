"""Terminal implementations of the pod selection Chooser."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from kdbg.cli.output import Table, status_markup
from kdbg.services.resolver import MatchCandidate
from kdbg.services.selection import Chooser


def render_candidates(console: Console, candidates: Sequence[MatchCandidate]) -> None:
    """Print candidates as a numbered table."""
    table = Table(title="Multiple pods found", show_header=True)
    table.add_column("#", style="bold", no_wrap=True, justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Namespace", style="dim")
    table.add_column("Status", no_wrap=True)

    for index, candidate in enumerate(candidates, start=1):
        record = candidate.record
        table.add_row(str(index), record.name, record.namespace, status_markup(record.status))

    console.print(table)


class ConsoleChooser(Chooser):
    """Interactive chooser reading from the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def present(self, candidates: Sequence[MatchCandidate]) -> None:
        render_candidates(self.console, candidates)

    def read_choice(self) -> str | None:
        try:
            return Prompt.ask(
                "Select a pod [dim](number, or q to cancel)[/dim]",
                console=self.console,
            )
        except EOFError:
            return None

    def reject(self, raw: str, count: int) -> None:
        self.console.print(
            f"[red]Invalid choice '{escape(raw)}'.[/red] Enter a number from 1 to {count}, or q."
        )


class NonInteractiveChooser(Chooser):
    """Chooser for runs without a terminal: lists candidates, never selects."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def present(self, candidates: Sequence[MatchCandidate]) -> None:
        render_candidates(self.console, candidates)

    def read_choice(self) -> str | None:
        return None
