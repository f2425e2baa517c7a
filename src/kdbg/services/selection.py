"""Selection arbitration for resolved fragments.

The arbiter is the only point in the pipeline that may block on the
user. Terminal interaction is delegated to a :class:`Chooser` so that
tests and non-interactive runs can substitute their own implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import structlog

from kdbg.core.exceptions import PodNotFoundError, SelectionCancelledError
from kdbg.integrations.kubectl.models import PodRecord
from kdbg.services.resolver import Ambiguous, Exact, MatchCandidate, ResolutionOutcome

logger = structlog.get_logger()

CANCEL_INPUTS = frozenset({"q", "quit", "cancel"})


class Chooser(ABC):
    """Capability for presenting candidates and reading the user's choice."""

    @abstractmethod
    def present(self, candidates: Sequence[MatchCandidate]) -> None:
        """Display the numbered candidate list."""

    @abstractmethod
    def read_choice(self) -> str | None:
        """Read one line of input; None signals end of input."""

    def reject(self, raw: str, count: int) -> None:
        """Report an unusable choice before the next prompt."""


class SelectionArbiter:
    """Decide between proceeding, prompting, and failing for a resolution."""

    def __init__(self, chooser: Chooser) -> None:
        """Initialize the arbiter.

        Args:
            chooser: Capability used when a fragment is ambiguous.
        """
        self._chooser = chooser
        self._log = logger.bind(entity="selection")

    def arbitrate(
        self,
        outcome: ResolutionOutcome,
        fragment: str,
        namespace: str,
    ) -> PodRecord:
        """Turn a resolution outcome into a single target pod.

        Args:
            outcome: Result of :func:`kdbg.services.resolver.resolve`.
            fragment: The fragment that was resolved, for error context.
            namespace: The namespace scope, for error context.

        Returns:
            The selected pod.

        Raises:
            PodNotFoundError: If nothing matched.
            SelectionCancelledError: If the user aborted the choice.
        """
        if isinstance(outcome, Exact):
            self._log.debug("target_selected", pod=outcome.record.name, interactive=False)
            return outcome.record

        if isinstance(outcome, Ambiguous):
            return self._choose(outcome.candidates, fragment, namespace)

        raise PodNotFoundError(fragment, namespace)

    def _choose(
        self,
        candidates: Sequence[MatchCandidate],
        fragment: str,
        namespace: str,
    ) -> PodRecord:
        count = len(candidates)
        self._chooser.present(candidates)

        while True:
            raw = self._chooser.read_choice()
            if raw is None:
                raise SelectionCancelledError(
                    message=f"{count} pods match; be more specific or choose interactively",
                    fragment=fragment,
                    namespace=namespace,
                )

            choice = raw.strip()
            if choice.lower() in CANCEL_INPUTS:
                raise SelectionCancelledError(fragment=fragment, namespace=namespace)

            if choice.isdecimal() and 1 <= int(choice) <= count:
                record = candidates[int(choice) - 1].record
                self._log.debug("target_selected", pod=record.name, interactive=True)
                return record

            self._chooser.reject(raw, count)
