"""kubectl CLI wrapper for pod inventory retrieval.

Wraps the kubectl binary via subprocess. Every call is a single attempt:
the inventory is a point-in-time snapshot and is never cached.
"""

from __future__ import annotations

import json
import shutil
import subprocess
from datetime import UTC, datetime
from pathlib import Path

import structlog

from kdbg.core.exceptions import (
    ClusterUnreachableError,
    InvalidOptionError,
    ToolUnavailableError,
)
from kdbg.integrations.kubectl.models import ALL_NAMESPACES, PodRecord

logger = structlog.get_logger()

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

KUBECTL_BINARY = "kubectl"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30


def find_kubectl(binary_path: str | None = None) -> str:
    """Locate the kubectl binary.

    Args:
        binary_path: Explicit path or None to search PATH.

    Returns:
        Path to the kubectl binary.

    Raises:
        ToolUnavailableError: If not found.
    """
    if binary_path:
        path = Path(binary_path).expanduser()
        if not path.exists():
            raise ToolUnavailableError(binary_path)
        return str(path.resolve())

    found = shutil.which(KUBECTL_BINARY)
    if not found:
        raise ToolUnavailableError(KUBECTL_BINARY)

    return found


def namespace_args(namespace: str) -> list[str]:
    """Return the kubectl namespace flags for a namespace or the all-namespaces sentinel."""
    if namespace == ALL_NAMESPACES:
        return ["--all-namespaces"]
    return ["-n", namespace]


class KubectlClient:
    """Client for reading pod inventory through the kubectl CLI."""

    def __init__(
        self,
        binary_path: str | None = None,
        *,
        request_timeout: int = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize kubectl client.

        Args:
            binary_path: Optional explicit path to kubectl. If None, searches PATH.
            request_timeout: Timeout in seconds for inventory queries.

        Raises:
            ToolUnavailableError: If the binary is not found.
        """
        self._binary = find_kubectl(binary_path)
        self._timeout = request_timeout
        self._log = logger.bind(binary=self._binary)
        self._log.debug("kubectl_client_initialized")

    @property
    def binary(self) -> str:
        """Resolved path of the kubectl binary."""
        return self._binary

    def _run(
        self,
        args: list[str],
        *,
        namespace: str | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run a kubectl command and capture its output.

        Args:
            args: Command arguments (without the ``kubectl`` prefix).
            namespace: Namespace scope, used for error context.

        Returns:
            CompletedProcess result.

        Raises:
            ToolUnavailableError: If the binary cannot be spawned.
            ClusterUnreachableError: On non-zero exit or timeout.
        """
        cmd = [self._binary, *args]
        self._log.debug("running_kubectl", args=args)

        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise ToolUnavailableError(self._binary) from e
        except subprocess.CalledProcessError as e:
            detail = e.stderr.strip() if e.stderr else f"exit code {e.returncode}"
            raise ClusterUnreachableError(
                message=f"kubectl command failed: {detail}",
                stderr=e.stderr,
                namespace=namespace,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ClusterUnreachableError(
                message=f"kubectl command timed out after {self._timeout}s",
                namespace=namespace,
            ) from e

    # -----------------------------------------------------------------------
    # Inventory
    # -----------------------------------------------------------------------

    def get_pods(self, namespace: str) -> list[PodRecord]:
        """Fetch the current pods of a namespace.

        Args:
            namespace: Namespace name, or ``ALL_NAMESPACES``.

        Returns:
            Pod records in the order kubectl reported them. An empty
            namespace yields an empty list.

        Raises:
            InvalidOptionError: If the namespace is empty.
            ToolUnavailableError: If kubectl is missing.
            ClusterUnreachableError: If the cluster cannot be queried.
        """
        if not namespace or not namespace.strip():
            raise InvalidOptionError("namespace", "must not be empty")

        self._log.debug("fetching_pods", namespace=namespace)
        result = self._run(
            ["get", "pods", *namespace_args(namespace), "-o", "json"],
            namespace=namespace,
        )

        try:
            data = json.loads(result.stdout) if result.stdout.strip() else {}
        except json.JSONDecodeError as e:
            raise ClusterUnreachableError(
                message="kubectl returned output that is not valid JSON",
                namespace=namespace,
            ) from e

        items = data.get("items", []) if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ClusterUnreachableError(
                message="kubectl returned an unexpected pod list",
                namespace=namespace,
            )

        now = datetime.now(UTC)
        pods = [PodRecord.from_json(item, now=now) for item in items if isinstance(item, dict)]
        self._log.info("pods_fetched", namespace=namespace, count=len(pods))
        return pods
