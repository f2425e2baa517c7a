"""kdbg exception taxonomy.

Every failure surfaced to the user derives from :class:`KdbgError` and
carries the exit code the CLI terminates with, so scripts can tell the
failure categories apart.
"""

from __future__ import annotations


class KdbgError(Exception):
    """Base exception for kdbg operations.

    Attributes:
        message: Human-readable error message.
        fragment: The pod-name fragment being resolved (if applicable).
        namespace: The namespace scope of the operation (if applicable).
        exit_code: Process exit code used by the CLI for this error.
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        fragment: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KdbgError.

        Args:
            message: Human-readable error message.
            fragment: Pod-name fragment involved.
            namespace: Namespace scope involved.
        """
        super().__init__(message)
        self.message = message
        self.fragment = fragment
        self.namespace = namespace

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]
        if self.fragment is not None:
            loc = f"[fragment '{self.fragment}'"
            if self.namespace:
                loc += f" in {self.namespace}"
            loc += "]"
            parts.append(loc)
        return " ".join(parts)


# =============================================================================
# Inventory
# =============================================================================


class FetchError(KdbgError):
    """Raised when the pod inventory cannot be retrieved."""

    exit_code = 6


class ToolUnavailableError(FetchError):
    """Raised when the kubectl binary is missing or cannot be spawned."""

    exit_code = 5

    def __init__(self, binary: str = "kubectl") -> None:
        """Initialize ToolUnavailableError.

        Args:
            binary: Name or path of the binary that could not be found.
        """
        super().__init__(
            message=(
                f"{binary} not found. Install from: https://kubernetes.io/docs/tasks/tools/"
            ),
        )
        self.binary = binary


class ClusterUnreachableError(FetchError):
    """Raised when kubectl cannot reach the cluster or returns unusable output."""

    def __init__(
        self,
        message: str = "Cannot reach Kubernetes cluster",
        stderr: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize ClusterUnreachableError.

        Args:
            message: Human-readable error message.
            stderr: Captured stderr of the failed kubectl call.
            namespace: Namespace scope that was queried.
        """
        super().__init__(message=message, namespace=namespace)
        self.stderr = stderr


# =============================================================================
# Selection
# =============================================================================


class SelectionError(KdbgError):
    """Base exception for target selection failures."""

    exit_code = 3


class PodNotFoundError(SelectionError):
    """Raised when no pod matches the given fragment."""

    def __init__(self, fragment: str, namespace: str) -> None:
        """Initialize PodNotFoundError.

        Args:
            fragment: The fragment that matched nothing.
            namespace: The namespace scope that was searched.
        """
        if fragment:
            message = f"No pods found matching '{fragment}'"
        else:
            message = "A pod name or fragment is required"
        super().__init__(message=message, fragment=fragment, namespace=namespace)


class SelectionCancelledError(SelectionError):
    """Raised when the user aborts an interactive pod selection."""

    exit_code = 4

    def __init__(
        self,
        message: str = "Pod selection cancelled",
        fragment: str | None = None,
        namespace: str | None = None,
    ) -> None:
        super().__init__(message=message, fragment=fragment, namespace=namespace)


# =============================================================================
# Build
# =============================================================================


class BuildError(KdbgError):
    """Base exception for command construction failures."""

    exit_code = 2


class InvalidOptionError(BuildError):
    """Raised when an operation option fails its semantic constraint."""

    def __init__(self, option: str, reason: str) -> None:
        """Initialize InvalidOptionError.

        Args:
            option: Name of the offending option.
            reason: Why the value was rejected.
        """
        super().__init__(message=f"Invalid value for '{option}': {reason}")
        self.option = option
        self.reason = reason


# =============================================================================
# Execution
# =============================================================================


class ExecutionError(KdbgError):
    """Base exception for kubectl execution failures."""


class NonZeroExitError(ExecutionError):
    """Raised when kubectl exits with a non-zero status."""

    def __init__(self, exit_code: int, message: str | None = None) -> None:
        """Initialize NonZeroExitError.

        Args:
            exit_code: Exit status of the kubectl process.
            message: Optional description of the failed step.
        """
        super().__init__(message=message or f"kubectl exited with status {exit_code}")
        self.exit_code = exit_code


class ExecutionInterruptedError(ExecutionError):
    """Raised when a termination signal arrives during an operation.

    Not reported as an error; the CLI exits quietly with status 130.
    """

    exit_code = 130

    def __init__(self, signum: int | None = None) -> None:
        message = "Interrupted"
        if signum is not None:
            message += f" by signal {signum}"
        super().__init__(message=message)
        self.signum = signum
