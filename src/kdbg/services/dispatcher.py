"""Operation dispatcher.

Wires the pipeline for one invocation::

    fragment + namespace -> inventory -> resolver -> arbiter -> builder -> executor

Options are validated before the inventory is fetched, so an invalid
request never spawns a subprocess. Debug requests run under a
:class:`~kdbg.services.lifecycle.DebugPodSession` scope.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from kdbg.core.config import KdbgConfig
from kdbg.core.exceptions import NonZeroExitError
from kdbg.integrations.kubectl.client import KubectlClient
from kdbg.integrations.kubectl.executor import Executor, ExitOutcome
from kdbg.integrations.kubectl.models import PodRecord
from kdbg.services.command_builder import (
    DEFAULT_DEBUG_SHELL,
    CommandBuilder,
    OperationKind,
    OperationRequest,
)
from kdbg.services.lifecycle import DebugPodSession
from kdbg.services.resolver import filter_pods, resolve
from kdbg.services.selection import SelectionArbiter

logger = structlog.get_logger()

# Exit statuses kubectl exec reports when the requested executable is missing
SHELL_NOT_FOUND_CODES = frozenset({126, 127})

_BANNERS: dict[OperationKind, str] = {
    OperationKind.LOGS: "Logs for pod",
    OperationKind.EXEC: "Executing in pod",
    OperationKind.SHELL: "Opening shell in pod",
    OperationKind.DESCRIBE: "Describing pod",
    OperationKind.TOP: "Resource usage for pod",
    OperationKind.FORWARD: "Port forwarding to pod",
    OperationKind.RESTART: "Restarting pod",
    OperationKind.EVENTS: "Events for pod",
}


def _discard(message: str) -> None:
    return None


class OperationDispatcher:
    """Run operation requests through the resolution and execution pipeline."""

    _entity_name = "dispatcher"

    def __init__(
        self,
        client: KubectlClient,
        executor: Executor,
        arbiter: SelectionArbiter,
        builder: CommandBuilder | None = None,
        config: KdbgConfig | None = None,
        *,
        notify: Callable[[str], None] | None = None,
        warn: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            client: Inventory source.
            executor: Runs the built kubectl commands.
            arbiter: Turns resolution outcomes into a single pod.
            builder: Command builder (a default one if omitted).
            config: Effective configuration (defaults if omitted).
            notify: Receives informational banners for the user.
            warn: Receives non-fatal warnings for the user.
        """
        self._client = client
        self._executor = executor
        self._arbiter = arbiter
        self._builder = builder or CommandBuilder()
        self._config = config or KdbgConfig()
        self._notify = notify or _discard
        self._warn = warn or _discard
        self._log = logger.bind(entity=self._entity_name)

    # =========================================================================
    # Inventory
    # =========================================================================

    def list_pods(self, request: OperationRequest) -> list[PodRecord]:
        """Fetch the inventory and keep the pods whose name contains the fragment."""
        self._builder.validate(request)
        pods = self._client.get_pods(request.namespace)
        return filter_pods(request.target, pods)

    def resolve_target(self, request: OperationRequest) -> PodRecord:
        """Resolve the request's fragment to exactly one pod.

        Raises:
            PodNotFoundError: If nothing matches.
            SelectionCancelledError: If an ambiguous choice is aborted.
            FetchError: If the inventory cannot be fetched.
        """
        fragment = request.target or ""
        pods = self._client.get_pods(request.namespace)
        outcome = resolve(fragment, pods, threshold=self._config.similarity_threshold)
        self._log.debug(
            "fragment_outcome",
            fragment=fragment,
            namespace=request.namespace,
            outcome=type(outcome).__name__,
        )
        return self._arbiter.arbitrate(outcome, fragment, request.namespace)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def dispatch(self, request: OperationRequest) -> ExitOutcome:
        """Execute one operation request.

        Returns:
            The kubectl exit outcome. A streaming session ended by the user
            is a successful outcome.

        Raises:
            KdbgError: Any failure of the pipeline; ``NonZeroExitError``
                carries kubectl's own exit status.
        """
        self._builder.validate(request)
        self._log.info(
            "dispatching_operation",
            kind=str(request.kind),
            namespace=request.namespace,
            target=request.target,
        )

        if request.kind == OperationKind.DEBUG:
            return self._debug(request)

        if not request.requires_target:
            return self._run(request, self._builder.build(request))

        pod = self.resolve_target(request)
        scoped = request.with_namespace(pod.namespace)
        self._announce(scoped, pod)

        if request.kind == OperationKind.SHELL and request.options.get("shell") is None:
            return self._shell_with_fallback(scoped, pod)

        return self._run(scoped, self._builder.build(scoped, pod.name))

    def _run(self, request: OperationRequest, args: list[str]) -> ExitOutcome:
        outcome = self._executor.execute(args, streaming=request.streaming)
        return self._check(outcome)

    def _check(self, outcome: ExitOutcome) -> ExitOutcome:
        if outcome.interrupted:
            self._log.info("session_ended_by_user")
            return outcome
        if outcome.exit_code != 0:
            raise NonZeroExitError(outcome.exit_code)
        return outcome

    def _announce(self, request: OperationRequest, pod: PodRecord) -> None:
        banner = _BANNERS.get(request.kind)
        if banner:
            self._notify(f"{banner}: {pod.name} (namespace: {pod.namespace})")

    # =========================================================================
    # Shell
    # =========================================================================

    def _shell_with_fallback(self, request: OperationRequest, pod: PodRecord) -> ExitOutcome:
        """Open an interactive session with the first shell that exists.

        Each candidate is checked with a short captured ``<shell> -c 'exit 0'``
        call; only a missing-executable status moves on to the next one.
        Exactly one interactive session is opened, so the exit status of
        the user's session is never mistaken for a missing shell.
        """
        shells = self._config.shell_candidates
        raw_container = request.options.get("container")
        container = str(raw_container) if raw_container else None
        check = ExitOutcome(exit_code=1)

        for shell in shells:
            check = self._executor.execute(
                self._builder.shell_check_args(pod.name, request.namespace, shell, container),
                streaming=False,
                capture=True,
                timeout=self._config.request_timeout,
            )
            if check.exit_code in SHELL_NOT_FOUND_CODES:
                self._log.debug("shell_unavailable", shell=shell, exit_code=check.exit_code)
                continue
            args = self._builder.shell_args(pod.name, request.namespace, shell, container)
            return self._check(self._executor.execute(args, streaming=True))

        raise NonZeroExitError(
            check.exit_code,
            message=f"Failed to open a shell (tried {', '.join(shells)})",
        )

    # =========================================================================
    # Debug
    # =========================================================================

    def _debug(self, request: OperationRequest) -> ExitOutcome:
        image = str(request.option("image", self._config.debug_image)).strip()
        shell = request.option("shell", DEFAULT_DEBUG_SHELL)

        session = DebugPodSession(
            self._executor,
            self._builder,
            namespace=request.namespace,
            image=image,
            ready_timeout=self._config.debug_ready_timeout,
            ttl=self._config.debug_pod_ttl,
            request_timeout=self._config.request_timeout,
            warn=self._warn,
        )
        self._notify(
            f"Creating debug pod: {session.name} (image: {image}, namespace: {session.namespace})"
        )
        self._notify("The pod is deleted when you exit the shell")

        with session:
            outcome = session.attach(shell)
        return self._check(outcome)
