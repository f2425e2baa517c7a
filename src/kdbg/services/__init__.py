"""Pipeline services: resolution, selection, command building, lifecycle, dispatch."""

from kdbg.services.command_builder import CommandBuilder, OperationKind, OperationRequest
from kdbg.services.dispatcher import OperationDispatcher
from kdbg.services.lifecycle import DebugPodSession, SessionState
from kdbg.services.resolver import Ambiguous, Exact, MatchCandidate, NoMatch, resolve
from kdbg.services.selection import Chooser, SelectionArbiter

__all__ = [
    "Ambiguous",
    "Chooser",
    "CommandBuilder",
    "DebugPodSession",
    "Exact",
    "MatchCandidate",
    "NoMatch",
    "OperationDispatcher",
    "OperationKind",
    "OperationRequest",
    "SelectionArbiter",
    "SessionState",
    "resolve",
]
