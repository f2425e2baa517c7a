"""Shared pytest fixtures for kdbg tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Sequence

import pytest
from typer.testing import CliRunner

from kdbg.integrations.kubectl.models import PodRecord, PodStatus
from kdbg.services.resolver import MatchCandidate
from kdbg.services.selection import Chooser


class ScriptedChooser(Chooser):
    """Chooser that replays canned answers and records what it was shown."""

    def __init__(self, answers: Iterable[str | None] = ()) -> None:
        self.answers = list(answers)
        self.presented: list[Sequence[MatchCandidate]] = []
        self.rejected: list[str] = []
        self.reads = 0

    def present(self, candidates: Sequence[MatchCandidate]) -> None:
        self.presented.append(candidates)

    def read_choice(self) -> str | None:
        self.reads += 1
        if not self.answers:
            return None
        return self.answers.pop(0)

    def reject(self, raw: str, count: int) -> None:
        self.rejected.append(raw)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables for each test."""
    # Clear any KDBG_ prefixed environment variables
    for key in list(os.environ.keys()):
        if key.startswith("KDBG_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_pod() -> Callable[..., PodRecord]:
    """Factory for pod records with sensible defaults."""

    def _make(
        name: str,
        namespace: str = "default",
        status: PodStatus = PodStatus.RUNNING,
        age_seconds: int = 120,
        restart_count: int = 0,
    ) -> PodRecord:
        return PodRecord(
            name=name,
            namespace=namespace,
            status=status,
            age_seconds=age_seconds,
            restart_count=restart_count,
        )

    return _make


@pytest.fixture
def sample_pods(make_pod: Callable[..., PodRecord]) -> list[PodRecord]:
    """Three pods: two replicas of my-app and one billing worker."""
    return [
        make_pod("my-app-deployment-7d4f8c9b5-xk2lp"),
        make_pod("my-app-deployment-7d4f8c9b5-yz9qm"),
        make_pod("billing-worker-abc123", namespace="payments"),
    ]


@pytest.fixture
def scripted_chooser() -> Callable[..., ScriptedChooser]:
    """Factory for choosers that answer prompts from a script."""
    return ScriptedChooser
