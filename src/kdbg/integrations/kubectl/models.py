"""Data models for kubectl pod inventory.

Typed, immutable records built from ``kubectl get pods -o json`` output.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

# Sentinel namespace meaning "query every namespace"
ALL_NAMESPACES = "*"


class PodStatus(StrEnum):
    """Pod lifecycle phase as reported by the API server."""

    RUNNING = "Running"
    PENDING = "Pending"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def from_phase(cls, phase: str | None) -> PodStatus:
        """Map a raw ``status.phase`` value, defaulting to UNKNOWN."""
        try:
            return cls(phase or "Unknown")
        except ValueError:
            return cls.UNKNOWN


def _parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp such as ``2024-01-15T10:30:00Z``."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class PodRecord:
    """A pod observed in one inventory snapshot."""

    name: str
    namespace: str
    status: PodStatus
    age_seconds: int
    restart_count: int

    @classmethod
    def from_json(cls, data: dict[str, Any], now: datetime | None = None) -> PodRecord:
        """Create a PodRecord from one ``kubectl get pods -o json`` item.

        Args:
            data: A single entry of the ``items`` array.
            now: Reference time for the age computation (defaults to now, UTC).
        """
        metadata = data.get("metadata") or {}
        status = data.get("status") or {}

        created = _parse_timestamp(metadata.get("creationTimestamp"))
        if created is None:
            age = 0
        else:
            reference = now or datetime.now(UTC)
            age = max(0, int((reference - created).total_seconds()))

        restarts = sum(
            int(container.get("restartCount", 0) or 0)
            for container in status.get("containerStatuses") or []
        )

        return cls(
            name=str(metadata.get("name", "")),
            namespace=str(metadata.get("namespace", "default")),
            status=PodStatus.from_phase(status.get("phase")),
            age_seconds=age,
            restart_count=restarts,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dict for JSON/YAML output."""
        return {
            "name": self.name,
            "namespace": self.namespace,
            "status": str(self.status),
            "age_seconds": self.age_seconds,
            "restart_count": self.restart_count,
        }


def format_age(seconds: int) -> str:
    """Format an age in seconds as ``45s``, ``12m``, ``3h`` or ``8d``."""
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"
