"""Lifecycle management for transient debug pods.

A :class:`DebugPodSession` owns one debug pod for the duration of a
``with`` block::

    Uninitialized -> Creating -> Ready -> InUse -> TearingDown -> Done

Any failure jumps straight to TearingDown. The delete step is registered
before the pod is created, so it runs exactly once on every exit path:
normal shell exit, Ctrl-C, SIGTERM/SIGHUP, and creation or attach
failures. Teardown problems are reported as warnings and never replace
the outcome of the operation itself.
"""

from __future__ import annotations

import signal
import threading
import time
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from types import FrameType, TracebackType
from typing import Any

import structlog

from kdbg.core.exceptions import ExecutionInterruptedError, KdbgError, NonZeroExitError
from kdbg.integrations.kubectl.executor import Executor, ExitOutcome
from kdbg.services.command_builder import DEFAULT_DEBUG_SHELL, CommandBuilder

logger = structlog.get_logger()

# Signals converted into ExecutionInterruptedError while a session is open
_TEARDOWN_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None)) if sig
)


class SessionState(StrEnum):
    """States of a debug pod session."""

    UNINITIALIZED = "Uninitialized"
    CREATING = "Creating"
    READY = "Ready"
    IN_USE = "InUse"
    TEARING_DOWN = "TearingDown"
    DONE = "Done"


class TransientResourceKind(StrEnum):
    """Kinds of resources kdbg creates for itself."""

    DEBUG_POD = "DebugPod"


@dataclass(frozen=True)
class TransientResource:
    """A resource that exists only for one debugging session."""

    kind: TransientResourceKind
    identifier: str
    namespace: str
    created_at: datetime


def generate_debug_pod_name(now: float | None = None) -> str:
    """Return a debug pod name of the form ``debug-<unix timestamp>``."""
    return f"debug-{int(now if now is not None else time.time())}"


def _raise_interrupt(signum: int, frame: FrameType | None) -> None:
    raise ExecutionInterruptedError(signum)


class DebugPodSession:
    """Scoped owner of one transient debug pod."""

    def __init__(
        self,
        executor: Executor,
        builder: CommandBuilder,
        *,
        namespace: str,
        image: str,
        ready_timeout: int = 60,
        ttl: int = 3600,
        request_timeout: int = 30,
        name: str | None = None,
        warn: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            executor: Executor used for every kubectl call.
            builder: Command builder producing the kubectl arguments.
            namespace: Namespace the debug pod is created in.
            image: Container image of the debug pod.
            ready_timeout: Seconds to wait for the pod to become ready.
            ttl: Seconds the idle pod container sleeps before exiting.
            request_timeout: Timeout for the create and delete calls.
            name: Explicit pod name (defaults to ``debug-<timestamp>``).
            warn: Callback receiving user-facing teardown warnings.
        """
        self._executor = executor
        self._builder = builder
        self._namespace = namespace
        self._image = image
        self._ready_timeout = ready_timeout
        self._ttl = ttl
        self._request_timeout = request_timeout
        self._name = name or generate_debug_pod_name()
        self._warn = warn
        self._state = SessionState.UNINITIALIZED
        self._resource: TransientResource | None = None
        self._stack = ExitStack()
        self._previous_handlers: dict[int, Any] = {}
        self._log = logger.bind(entity="debug_pod", pod=self._name, namespace=namespace)

    @property
    def name(self) -> str:
        return self._name

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def resource(self) -> TransientResource | None:
        """The created pod, once creation has succeeded."""
        return self._resource

    # -----------------------------------------------------------------------
    # Context manager
    # -----------------------------------------------------------------------

    def __enter__(self) -> DebugPodSession:
        self._stack.callback(self.teardown)
        self._install_signal_handlers()
        try:
            self._create()
        except BaseException:
            self._stack.close()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._stack.close()

    # -----------------------------------------------------------------------
    # Transitions
    # -----------------------------------------------------------------------

    def _create(self) -> None:
        self._state = SessionState.CREATING
        self._log.info("creating_debug_pod", image=self._image)

        created = self._executor.execute(
            self._builder.debug_create_args(self._name, self._namespace, self._image, self._ttl),
            streaming=False,
            capture=True,
            timeout=self._request_timeout,
        )
        if not created.ok:
            raise NonZeroExitError(
                created.exit_code,
                message=_failure_message("Failed to create debug pod", created),
            )
        self._resource = TransientResource(
            kind=TransientResourceKind.DEBUG_POD,
            identifier=self._name,
            namespace=self._namespace,
            created_at=datetime.now(UTC),
        )
        self._log.info("debug_pod_created")

        ready = self._executor.execute(
            self._builder.debug_wait_args(self._name, self._namespace, self._ready_timeout),
            streaming=False,
            capture=True,
            timeout=self._ready_timeout + self._request_timeout,
        )
        if not ready.ok:
            raise NonZeroExitError(
                ready.exit_code,
                message=_failure_message(
                    f"Debug pod did not become ready within {self._ready_timeout}s", ready
                ),
            )
        self._state = SessionState.READY
        self._log.info("debug_pod_ready")

    def attach(self, shell: str = DEFAULT_DEBUG_SHELL) -> ExitOutcome:
        """Open an interactive shell in the debug pod.

        Raises:
            RuntimeError: If the pod is not ready.
        """
        if self._state != SessionState.READY:
            raise RuntimeError(f"cannot attach to debug pod in state {self._state}")
        self._state = SessionState.IN_USE
        return self._executor.execute(
            self._builder.shell_args(self._name, self._namespace, shell),
            streaming=True,
        )

    def teardown(self) -> None:
        """Delete the debug pod. Safe to call more than once; never raises KdbgError."""
        if self._state in (SessionState.TEARING_DOWN, SessionState.DONE):
            return

        attempted = self._state != SessionState.UNINITIALIZED
        self._state = SessionState.TEARING_DOWN
        try:
            if attempted:
                self._delete()
        finally:
            self._restore_signal_handlers()
            self._state = SessionState.DONE

    def _delete(self) -> None:
        self._log.info("deleting_debug_pod")
        try:
            outcome = self._executor.execute(
                self._builder.debug_delete_args(self._name, self._namespace),
                streaming=False,
                capture=True,
                timeout=self._request_timeout,
            )
        except KdbgError as e:
            self._report_teardown_failure(e.message)
            return

        if not outcome.ok:
            self._report_teardown_failure(_failure_message("kubectl delete failed", outcome))
            return
        self._log.info("debug_pod_deleted")

    def _report_teardown_failure(self, detail: str) -> None:
        self._log.warning("debug_pod_teardown_failed", detail=detail)
        if self._warn:
            self._warn(
                f"Could not delete debug pod '{self._name}' in namespace "
                f"'{self._namespace}': {detail}. Remove it with: "
                f"kubectl delete pod {self._name} -n {self._namespace}"
            )

    # -----------------------------------------------------------------------
    # Signals
    # -----------------------------------------------------------------------

    def _install_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            return
        previous: dict[int, Any] = {}
        for sig in _TEARDOWN_SIGNALS:
            previous[sig] = signal.signal(sig, _raise_interrupt)
        self._previous_handlers = previous

    def _restore_signal_handlers(self) -> None:
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers = {}


def _failure_message(prefix: str, outcome: ExitOutcome) -> str:
    detail = outcome.stderr.strip() or f"exit code {outcome.exit_code}"
    return f"{prefix}: {detail}"
