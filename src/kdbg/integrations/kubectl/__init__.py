"""kubectl integration - inventory client, executor, and pod models."""

from kdbg.integrations.kubectl.client import KubectlClient, find_kubectl, namespace_args
from kdbg.integrations.kubectl.executor import Executor, ExitOutcome
from kdbg.integrations.kubectl.models import (
    ALL_NAMESPACES,
    PodRecord,
    PodStatus,
    format_age,
)

__all__ = [
    "ALL_NAMESPACES",
    "Executor",
    "ExitOutcome",
    "KubectlClient",
    "PodRecord",
    "PodStatus",
    "find_kubectl",
    "format_age",
    "namespace_args",
]
