"""Command construction for kubectl invocations.

Maps a logical operation, its options, and a resolved pod name onto the
exact kubectl argument vector. All option checks happen here, before any
subprocess is spawned.
"""

from __future__ import annotations

import dataclasses
import re
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from kdbg.core.exceptions import InvalidOptionError
from kdbg.integrations.kubectl.client import namespace_args
from kdbg.integrations.kubectl.models import ALL_NAMESPACES

DEFAULT_EXEC_COMMAND = "/bin/sh"
DEFAULT_DEBUG_SHELL = "/bin/sh"
MANAGED_BY_LABEL = "app.kubernetes.io/managed-by=kdbg"
MAX_PORT = 65535

# Duration regex: matches "1h", "30m", "5s", "1h30m", "2h15m30s", etc.
_DURATION_RE = re.compile(r"^(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?$")


class OperationKind(StrEnum):
    """Logical operations supported by kdbg."""

    LIST = "list"
    LOGS = "logs"
    EXEC = "exec"
    SHELL = "shell"
    DEBUG = "debug"
    DESCRIBE = "describe"
    TOP = "top"
    FORWARD = "forward"
    RESTART = "restart"
    EVENTS = "events"


# Operations that act on exactly one resolved pod
TARGETED_KINDS = frozenset(
    {
        OperationKind.LOGS,
        OperationKind.EXEC,
        OperationKind.SHELL,
        OperationKind.DESCRIBE,
        OperationKind.FORWARD,
        OperationKind.RESTART,
        OperationKind.EVENTS,
    }
)

# Operations whose stdio is connected live to the terminal
_ALWAYS_STREAMING = frozenset(
    {
        OperationKind.EXEC,
        OperationKind.SHELL,
        OperationKind.DEBUG,
        OperationKind.FORWARD,
    }
)


@dataclass(frozen=True)
class OperationRequest:
    """One user invocation: operation, namespace scope, fragment, options."""

    kind: OperationKind
    namespace: str
    target: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def option(self, key: str, default: Any = None) -> Any:
        """Return an option value, or ``default`` when unset or None."""
        value = self.options.get(key)
        return default if value is None else value

    def with_namespace(self, namespace: str) -> OperationRequest:
        """Return a copy scoped to a concrete namespace."""
        return dataclasses.replace(self, namespace=namespace)

    @property
    def requires_target(self) -> bool:
        """Whether the operation must resolve to a single pod."""
        return self.kind in TARGETED_KINDS or (
            self.kind == OperationKind.TOP and bool(self.target)
        )

    @property
    def streaming(self) -> bool:
        """Whether stdio is connected live to the terminal."""
        if self.kind == OperationKind.LOGS:
            return bool(self.option("follow", False))
        return self.kind in _ALWAYS_STREAMING


def parse_port(option: str, value: Any) -> int:
    """Parse and validate a TCP port number.

    Raises:
        InvalidOptionError: If the value is not an integer in 1..65535.
    """
    if isinstance(value, bool):
        raise InvalidOptionError(option, f"'{value}' is not a port number")
    if isinstance(value, int):
        port = value
    else:
        text = str(value).strip()
        if not re.fullmatch(r"[+-]?\d+", text):
            raise InvalidOptionError(option, f"'{value}' is not a port number")
        port = int(text)
    if port <= 0 or port > MAX_PORT:
        raise InvalidOptionError(option, f"{port} is outside 1-{MAX_PORT}")
    return port


def _require_text(option: str, value: Any) -> str:
    text = str(value).strip()
    if not text:
        raise InvalidOptionError(option, "must not be empty")
    return text


def _split_command(value: Any) -> list[str]:
    """Split an exec command string into argv."""
    if isinstance(value, Sequence) and not isinstance(value, str):
        argv = [str(part) for part in value]
    else:
        try:
            argv = shlex.split(str(value))
        except ValueError as e:
            raise InvalidOptionError("command", str(e)) from e
    if not argv or not argv[0].strip():
        raise InvalidOptionError("command", "must not be empty")
    return argv


class CommandBuilder:
    """Build kubectl argument vectors for operation requests."""

    def validate(self, request: OperationRequest) -> None:
        """Check every option of a request.

        Raises:
            InvalidOptionError: If any option fails its constraint.
        """
        if not request.namespace or not request.namespace.strip():
            raise InvalidOptionError("namespace", "must not be empty")

        kind = request.kind
        container = request.options.get("container")
        if container is not None:
            _require_text("container", container)

        if kind == OperationKind.LOGS:
            self._tail(request)
            since = request.option("since")
            if since is not None:
                self._since(since)
        elif kind == OperationKind.EXEC:
            command = request.options.get("command")
            if command is not None:
                _split_command(command)
        elif kind == OperationKind.SHELL:
            shell = request.options.get("shell")
            if shell is not None:
                _require_text("shell", shell)
        elif kind == OperationKind.DEBUG:
            if request.namespace == ALL_NAMESPACES:
                raise InvalidOptionError("namespace", "debug pods need a concrete namespace")
            _require_text("image", request.option("image", ""))
        elif kind == OperationKind.FORWARD:
            self._ports(request)
            address = request.options.get("address")
            if address is not None:
                _require_text("address", address)

    def build(self, request: OperationRequest, target_name: str | None = None) -> list[str]:
        """Build the kubectl arguments (without the binary) for a request.

        Args:
            request: The operation request, scoped to the pod's namespace
                for targeted operations.
            target_name: Exact pod name for targeted operations, or the
                debug pod name for ``debug``.

        Returns:
            The argument vector.

        Raises:
            InvalidOptionError: If an option is invalid or a required
                target is missing.
        """
        self.validate(request)
        kind = request.kind

        if kind == OperationKind.LIST:
            args = ["get", "pods", *namespace_args(request.namespace)]
            if request.option("verbose", False):
                args.extend(["-o", "wide"])
            return args

        if kind == OperationKind.TOP and not target_name:
            args = ["top", "pods", *namespace_args(request.namespace)]
            if request.option("containers", False):
                args.append("--containers")
            return args

        pod = self._target(request, target_name)
        ns = self._concrete_namespace(request)
        container = request.options.get("container")

        if kind == OperationKind.LOGS:
            args = ["logs", pod, "-n", ns, "--tail", str(self._tail(request))]
            if request.option("follow", False):
                args.append("-f")
            if container:
                args.extend(["-c", str(container).strip()])
            if request.option("previous", False):
                args.append("--previous")
            if request.option("timestamps", False):
                args.append("--timestamps")
            since = request.option("since")
            if since is not None:
                args.append(f"--since={self._since(since)}")
            return args

        if kind == OperationKind.EXEC:
            command = _split_command(request.option("command", DEFAULT_EXEC_COMMAND))
            args = ["exec"]
            args.extend(["-it"] if request.option("tty", True) else ["-i"])
            args.extend([pod, "-n", ns])
            if container:
                args.extend(["-c", str(container).strip()])
            return [*args, "--", *command]

        if kind == OperationKind.SHELL:
            shell = request.option("shell", DEFAULT_EXEC_COMMAND)
            return self.shell_args(pod, ns, shell, str(container) if container else None)

        if kind == OperationKind.DEBUG:
            return self.shell_args(pod, ns, request.option("shell", DEFAULT_DEBUG_SHELL))

        if kind == OperationKind.DESCRIBE:
            return ["describe", "pod", pod, "-n", ns]

        if kind == OperationKind.TOP:
            args = ["top", "pod", pod, "-n", ns]
            if request.option("containers", False):
                args.append("--containers")
            return args

        if kind == OperationKind.FORWARD:
            local_port, remote_port = self._ports(request)
            args = ["port-forward", pod, f"{local_port}:{remote_port}", "-n", ns]
            address = request.options.get("address")
            if address:
                args.extend(["--address", str(address).strip()])
            return args

        if kind == OperationKind.RESTART:
            return ["delete", "pod", pod, "-n", ns]

        if kind == OperationKind.EVENTS:
            return [
                "get",
                "events",
                "-n",
                ns,
                "--field-selector",
                f"involvedObject.name={pod}",
                "--sort-by",
                ".lastTimestamp",
            ]

        raise InvalidOptionError("kind", f"unsupported operation '{kind}'")

    # -----------------------------------------------------------------------
    # Shell and debug pod lifecycle
    # -----------------------------------------------------------------------

    def shell_args(
        self,
        pod: str,
        namespace: str,
        shell: str,
        container: str | None = None,
    ) -> list[str]:
        """Arguments for an interactive shell in a pod."""
        args = ["exec", "-it", pod, "-n", namespace]
        if container:
            args.extend(["-c", container.strip()])
        return [*args, "--", _require_text("shell", shell)]

    def shell_check_args(
        self,
        pod: str,
        namespace: str,
        shell: str,
        container: str | None = None,
    ) -> list[str]:
        """Arguments checking that a shell can be started, without a TTY."""
        args = ["exec", pod, "-n", namespace]
        if container:
            args.extend(["-c", container.strip()])
        return [*args, "--", _require_text("shell", shell), "-c", "exit 0"]

    def debug_create_args(self, name: str, namespace: str, image: str, ttl: int) -> list[str]:
        """Arguments creating a debug pod that idles until attached to."""
        return [
            "run",
            name,
            "--image",
            _require_text("image", image),
            "-n",
            namespace,
            "--restart=Never",
            "--labels",
            MANAGED_BY_LABEL,
            "--command",
            "--",
            "sleep",
            str(ttl),
        ]

    def debug_wait_args(self, name: str, namespace: str, timeout: int) -> list[str]:
        """Arguments waiting for a debug pod to become ready."""
        return [
            "wait",
            "--for=condition=Ready",
            f"pod/{name}",
            "-n",
            namespace,
            f"--timeout={timeout}s",
        ]

    def debug_delete_args(self, name: str, namespace: str) -> list[str]:
        """Arguments deleting a debug pod without blocking on termination."""
        return ["delete", "pod", name, "-n", namespace, "--ignore-not-found", "--wait=false"]

    # -----------------------------------------------------------------------
    # Option helpers
    # -----------------------------------------------------------------------

    @staticmethod
    def _target(request: OperationRequest, target_name: str | None) -> str:
        if not target_name or not target_name.strip():
            raise InvalidOptionError("pod", f"'{request.kind}' needs a resolved pod name")
        return target_name.strip()

    @staticmethod
    def _concrete_namespace(request: OperationRequest) -> str:
        if request.namespace == ALL_NAMESPACES:
            raise InvalidOptionError(
                "namespace", f"'{request.kind}' needs the pod's concrete namespace"
            )
        return request.namespace

    @staticmethod
    def _tail(request: OperationRequest) -> int:
        tail = request.option("tail", 100)
        if isinstance(tail, bool) or not isinstance(tail, int):
            raise InvalidOptionError("tail", f"'{tail}' is not a number")
        if tail < 0:
            raise InvalidOptionError("tail", "must be non-negative")
        return tail

    @staticmethod
    def _since(since: Any) -> str:
        text = str(since).strip()
        match = _DURATION_RE.match(text)
        if not text or not match or not any(match.groups()):
            raise InvalidOptionError(
                "since", f"'{since}' is not a duration like '1h', '30m', '5s', or '1h30m'"
            )
        return text

    @staticmethod
    def _ports(request: OperationRequest) -> tuple[int, int]:
        ports = request.options.get("ports")
        if (
            ports is None
            or isinstance(ports, (str, bytes))
            or not isinstance(ports, Sequence)
            or len(ports) != 2
        ):
            raise InvalidOptionError("ports", "exactly two ports are required: LOCAL POD")
        return parse_port("local_port", ports[0]), parse_port("pod_port", ports[1])
