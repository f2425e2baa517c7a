"""Subprocess executor for kubectl invocations.

Streaming operations (log follow, shell, exec, port-forward) inherit the
terminal's stdio and block until kubectl exits or the user interrupts.
Other operations pass output through or capture it.
"""

from __future__ import annotations

import signal
import subprocess
from dataclasses import dataclass
from typing import Any

import structlog

from kdbg.core.exceptions import ClusterUnreachableError, ToolUnavailableError

logger = structlog.get_logger()

# Seconds a child gets to exit after the interrupt is forwarded to it
INTERRUPT_GRACE_SECONDS = 5
INTERRUPTED_EXIT_CODE = 130


@dataclass(frozen=True)
class ExitOutcome:
    """Result of one kubectl invocation."""

    exit_code: int
    interrupted: bool = False
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """True when kubectl exited cleanly."""
        return self.exit_code == 0 and not self.interrupted


class Executor:
    """Run kubectl argument vectors as subprocesses."""

    def __init__(self, binary: str) -> None:
        """Initialize the executor.

        Args:
            binary: Resolved path of the kubectl binary.
        """
        self._binary = binary
        self._log = logger.bind(binary=binary)

    def execute(
        self,
        args: list[str],
        *,
        streaming: bool,
        capture: bool = False,
        timeout: float | None = None,
    ) -> ExitOutcome:
        """Execute kubectl with the given arguments.

        Args:
            args: Argument vector without the binary.
            streaming: Connect stdio to the terminal and treat Ctrl-C as the
                normal end of the session.
            capture: Capture stdout/stderr instead of passing them through.
                Ignored for streaming operations.
            timeout: Timeout in seconds for non-streaming calls.

        Returns:
            The exit outcome.

        Raises:
            ToolUnavailableError: If kubectl cannot be spawned.
            ClusterUnreachableError: If a non-streaming call times out.
        """
        cmd = [self._binary, *args]
        self._log.debug("running_kubectl", args=args, streaming=streaming)

        if streaming:
            return self._stream(cmd)

        kwargs: dict[str, Any] = {"text": True, "check": False, "timeout": timeout}
        if capture:
            kwargs["capture_output"] = True

        try:
            result = subprocess.run(cmd, **kwargs)
        except FileNotFoundError as e:
            raise ToolUnavailableError(self._binary) from e
        except subprocess.TimeoutExpired as e:
            raise ClusterUnreachableError(
                message=f"kubectl command timed out after {timeout}s",
            ) from e

        self._log.debug("kubectl_exited", exit_code=result.returncode)
        if not capture:
            return ExitOutcome(exit_code=result.returncode)
        return ExitOutcome(
            exit_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    def _stream(self, cmd: list[str]) -> ExitOutcome:
        """Run an interactive/streaming kubectl session."""
        try:
            process = subprocess.Popen(cmd)
        except FileNotFoundError as e:
            raise ToolUnavailableError(self._binary) from e

        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            self._log.info("session_interrupted", pid=process.pid)
            self._terminate(process)
            return ExitOutcome(exit_code=INTERRUPTED_EXIT_CODE, interrupted=True)
        except BaseException:
            self._terminate(process)
            raise

        self._log.debug("kubectl_exited", exit_code=returncode)
        return ExitOutcome(exit_code=returncode)

    def _terminate(self, process: subprocess.Popen[bytes]) -> None:
        """Forward the interrupt to the child and reap it."""
        if process.poll() is not None:
            return
        try:
            process.send_signal(signal.SIGINT)
            process.wait(timeout=INTERRUPT_GRACE_SECONDS)
        except (subprocess.TimeoutExpired, KeyboardInterrupt):
            process.kill()
            process.wait()
