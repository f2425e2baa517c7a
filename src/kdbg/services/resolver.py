"""Fuzzy resolution of pod-name fragments.

Turns a user-typed fragment into an exact pod, an ordered set of
candidates to choose from, or no match, using only the inventory
snapshot it is given.

Resolution order:

1. Case-insensitive equality with a pod name wins outright.
2. Case-insensitive containment: earlier match position first, then the
   shorter (tighter) name.
3. Similarity fallback: ``difflib.SequenceMatcher`` ratio against the full
   name; candidates below the threshold are dropped.

Remaining ties are broken by name, then namespace, so the same snapshot
and fragment always produce the same order.
"""

from __future__ import annotations

import difflib
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from kdbg.integrations.kubectl.models import PodRecord

logger = structlog.get_logger()

DEFAULT_SIMILARITY_THRESHOLD = 0.6


@dataclass(frozen=True)
class MatchCandidate:
    """A pod considered for a fragment, with its match score."""

    record: PodRecord
    score: float


@dataclass(frozen=True)
class Exact:
    """Exactly one pod matched."""

    record: PodRecord


@dataclass(frozen=True)
class Ambiguous:
    """Several pods matched; candidates are ordered best-first."""

    candidates: tuple[MatchCandidate, ...]


@dataclass(frozen=True)
class NoMatch:
    """Nothing in the snapshot matched."""


ResolutionOutcome = Exact | Ambiguous | NoMatch


def _containment_score(position: int) -> float:
    """Score a substring match; always ranks above any similarity score."""
    return 1.0 + 1.0 / (1 + position)


def _similarity(fragment: str, name: str) -> float:
    return difflib.SequenceMatcher(None, fragment, name).ratio()


def _finalize(candidates: list[MatchCandidate]) -> ResolutionOutcome:
    if not candidates:
        return NoMatch()
    if len(candidates) == 1:
        return Exact(candidates[0].record)
    return Ambiguous(tuple(candidates))


def resolve(
    fragment: str,
    candidates: Sequence[PodRecord],
    *,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> ResolutionOutcome:
    """Resolve a fragment against an inventory snapshot.

    Args:
        fragment: User-supplied partial pod name.
        candidates: Pods from a single inventory fetch.
        threshold: Minimum similarity ratio for fallback suggestions.

    Returns:
        ``Exact``, ``Ambiguous`` or ``NoMatch``. An empty fragment never
        selects a pod.
    """
    needle = fragment.strip().lower()
    if not needle or not candidates:
        return NoMatch()

    exact = [record for record in candidates if record.name.lower() == needle]
    if exact:
        # The same name can exist in several namespaces
        exact.sort(key=lambda r: r.namespace)
        outcome = _finalize([MatchCandidate(record, 2.0) for record in exact])
        logger.debug("fragment_resolved", fragment=fragment, strategy="exact")
        return outcome

    contained: list[tuple[int, PodRecord]] = []
    for record in candidates:
        position = record.name.lower().find(needle)
        if position >= 0:
            contained.append((position, record))

    if contained:
        contained.sort(
            key=lambda item: (item[0], len(item[1].name), item[1].name, item[1].namespace)
        )
        logger.debug(
            "fragment_resolved",
            fragment=fragment,
            strategy="substring",
            matches=len(contained),
        )
        return _finalize(
            [MatchCandidate(record, _containment_score(pos)) for pos, record in contained]
        )

    similar = [
        MatchCandidate(record, ratio)
        for record in candidates
        if (ratio := _similarity(needle, record.name.lower())) >= threshold
    ]
    similar.sort(key=lambda c: (-c.score, c.record.name, c.record.namespace))
    logger.debug(
        "fragment_resolved",
        fragment=fragment,
        strategy="similarity",
        matches=len(similar),
    )
    return _finalize(similar)


def filter_pods(fragment: str | None, records: Sequence[PodRecord]) -> list[PodRecord]:
    """Filter pods for list output.

    An empty fragment matches every pod; otherwise pods whose name
    contains the fragment (case-insensitively) are kept in input order.
    """
    needle = (fragment or "").strip().lower()
    if not needle:
        return list(records)
    return [record for record in records if needle in record.name.lower()]
