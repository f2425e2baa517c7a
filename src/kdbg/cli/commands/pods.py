"""Pod CLI commands.

Provides ``list``, ``logs``, ``exec``, ``shell``, ``debug``, ``describe``,
``top``, ``forward``, ``restart`` and ``events``. Every pod argument is a
fragment that is resolved against the live pod list.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Any

import typer
from rich.markup import escape

from kdbg.cli.commands.base import (
    AllNamespacesOption,
    ContainerOption,
    NamespaceOption,
    OutputOption,
    PodArgument,
    console,
    describe_scope,
    err_console,
    handle_kdbg_error,
    scope_namespace,
)
from kdbg.cli.output import OutputFormat, get_formatter
from kdbg.core.config import KdbgConfig
from kdbg.core.exceptions import KdbgError
from kdbg.integrations.kubectl.executor import INTERRUPTED_EXIT_CODE
from kdbg.services.command_builder import OperationKind, OperationRequest
from kdbg.services.dispatcher import OperationDispatcher


def register_pod_commands(
    app: typer.Typer,
    get_dispatcher: Callable[[], OperationDispatcher],
    get_config: Callable[[], KdbgConfig],
) -> None:
    """Register the pod commands on the kdbg app.

    Args:
        app: Root Typer app.
        get_dispatcher: Factory returning an OperationDispatcher.
        get_config: Returns the effective configuration.
    """

    def _run(
        kind: OperationKind,
        namespace: str,
        target: str | None = None,
        **options: Any,
    ) -> None:
        request = OperationRequest(kind=kind, namespace=namespace, target=target, options=options)
        try:
            get_dispatcher().dispatch(request)
        except KdbgError as e:
            handle_kdbg_error(e)
        except KeyboardInterrupt:
            err_console.print("\n[dim]Interrupted.[/dim]")
            raise typer.Exit(INTERRUPTED_EXIT_CODE) from None

    def _lookup_scope(namespace: str | None, all_namespaces: bool = False) -> str:
        return scope_namespace(namespace, all_namespaces, get_config().default_namespace)

    # =========================================================================
    # list
    # =========================================================================

    @app.command("list")
    def list_command(
        fragment: Annotated[
            str | None,
            typer.Argument(help="Only show pods whose name contains this text"),
        ] = None,
        namespace: NamespaceOption = None,
        all_namespaces: AllNamespacesOption = False,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Show restart counts and ages"),
        ] = False,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """List pods, optionally filtered by a name fragment.

        Examples:
            kdbg list
            kdbg list billing -n payments
            kdbg list -A -v -o json
        """
        scope = _lookup_scope(namespace, all_namespaces)
        request = OperationRequest(
            kind=OperationKind.LIST,
            namespace=scope,
            target=fragment,
            options={"verbose": verbose},
        )
        try:
            pods = get_dispatcher().list_pods(request)
        except KdbgError as e:
            handle_kdbg_error(e)
        except KeyboardInterrupt:
            raise typer.Exit(INTERRUPTED_EXIT_CODE) from None

        if not pods and output == OutputFormat.TABLE:
            if fragment:
                message = f"No pods found matching '{fragment}' in {describe_scope(scope)}"
            else:
                message = f"No pods found in {describe_scope(scope)}"
            err_console.print(f"[yellow]{escape(message)}[/yellow]")
            return

        get_formatter(output, console).format_pods(pods, verbose=verbose)

    # =========================================================================
    # logs
    # =========================================================================

    @app.command("logs")
    def logs_command(
        pod: PodArgument,
        namespace: NamespaceOption = None,
        follow: Annotated[
            bool,
            typer.Option("--follow", "-f", help="Stream logs in real-time"),
        ] = False,
        tail: Annotated[
            int | None,
            typer.Option("--tail", help="Number of lines from the end of the logs"),
        ] = None,
        container: ContainerOption = None,
        previous: Annotated[
            bool,
            typer.Option("--previous", "-p", help="Show logs from previous container instance"),
        ] = False,
        timestamps: Annotated[
            bool,
            typer.Option("--timestamps", help="Include timestamps in log output"),
        ] = False,
        since: Annotated[
            str | None,
            typer.Option("--since", help="Show logs since duration (e.g., 1h, 30m, 5s)"),
        ] = None,
    ) -> None:
        """Show or stream the logs of a pod.

        Examples:
            kdbg logs billing
            kdbg logs billing -f --tail 20
            kdbg logs api -C sidecar --since 1h --timestamps
        """
        _run(
            OperationKind.LOGS,
            _lookup_scope(namespace),
            pod,
            follow=follow,
            tail=tail if tail is not None else get_config().log_tail,
            container=container,
            previous=previous,
            timestamps=timestamps,
            since=since,
        )

    # =========================================================================
    # exec
    # =========================================================================

    @app.command("exec", context_settings={"allow_extra_args": True})
    def exec_command(
        ctx: typer.Context,
        pod: PodArgument,
        namespace: NamespaceOption = None,
        command: Annotated[
            str | None,
            typer.Option("--command", "-c", help="Command to run (default: /bin/sh)"),
        ] = None,
        container: ContainerOption = None,
        no_tty: Annotated[
            bool,
            typer.Option("--no-tty", help="Do not allocate a TTY"),
        ] = False,
    ) -> None:
        """Execute a command in a pod.

        Pass the command with -c, or as arguments after ``--``.

        Examples:
            kdbg exec api
            kdbg exec api -c "ls -la /app"
            kdbg exec api --no-tty -- cat /etc/hosts
        """
        extra = list(ctx.args)
        _run(
            OperationKind.EXEC,
            _lookup_scope(namespace),
            pod,
            command=extra or command,
            container=container,
            tty=not no_tty,
        )

    # =========================================================================
    # shell
    # =========================================================================

    @app.command("shell")
    def shell_command(
        pod: PodArgument,
        namespace: NamespaceOption = None,
        shell: Annotated[
            str | None,
            typer.Option(
                "--shell",
                "-c",
                help="Shell to start (default: try /bin/bash, then /bin/sh)",
            ),
        ] = None,
        container: ContainerOption = None,
    ) -> None:
        """Open an interactive shell in a pod.

        Examples:
            kdbg shell api
            kdbg shell api -c /bin/ash -C app
        """
        _run(
            OperationKind.SHELL,
            _lookup_scope(namespace),
            pod,
            shell=shell,
            container=container,
        )

    # =========================================================================
    # debug
    # =========================================================================

    @app.command("debug")
    def debug_command(
        namespace: Annotated[
            str | None,
            typer.Option(
                "--namespace",
                "-n",
                help="Namespace for the debug pod (default: config or 'default')",
            ),
        ] = None,
        image: Annotated[
            str | None,
            typer.Option("--image", help="Image of the debug pod (default: busybox)"),
        ] = None,
    ) -> None:
        """Start a temporary debug pod and open a shell in it.

        The pod is deleted when the shell exits, including on Ctrl-C.

        Examples:
            kdbg debug
            kdbg debug -n payments --image nicolaka/netshoot
        """
        config = get_config()
        _run(
            OperationKind.DEBUG,
            namespace if namespace is not None else config.debug_namespace,
            image=image if image is not None else config.debug_image,
        )

    # =========================================================================
    # describe / restart / events
    # =========================================================================

    @app.command("describe")
    def describe_command(pod: PodArgument, namespace: NamespaceOption = None) -> None:
        """Describe a pod."""
        _run(OperationKind.DESCRIBE, _lookup_scope(namespace), pod)

    @app.command("restart")
    def restart_command(pod: PodArgument, namespace: NamespaceOption = None) -> None:
        """Restart a pod by deleting it so its controller recreates it."""
        _run(OperationKind.RESTART, _lookup_scope(namespace), pod)

    @app.command("events")
    def events_command(pod: PodArgument, namespace: NamespaceOption = None) -> None:
        """Show the events of a pod, oldest first."""
        _run(OperationKind.EVENTS, _lookup_scope(namespace), pod)

    # =========================================================================
    # top
    # =========================================================================

    @app.command("top")
    def top_command(
        pod: Annotated[
            str | None,
            typer.Argument(help="Pod name or fragment (omit for all pods)"),
        ] = None,
        namespace: NamespaceOption = None,
        all_namespaces: AllNamespacesOption = False,
        containers: Annotated[
            bool,
            typer.Option("--containers", help="Show usage per container"),
        ] = False,
    ) -> None:
        """Show CPU and memory usage of pods.

        Examples:
            kdbg top -A
            kdbg top billing --containers
        """
        _run(
            OperationKind.TOP,
            _lookup_scope(namespace, all_namespaces),
            pod or None,
            containers=containers,
        )

    # =========================================================================
    # forward
    # =========================================================================

    @app.command("forward")
    def forward_command(
        pod: PodArgument,
        local_port: Annotated[str, typer.Argument(help="Local port")],
        pod_port: Annotated[str, typer.Argument(help="Port on the pod")],
        namespace: NamespaceOption = None,
        address: Annotated[
            str | None,
            typer.Option("--address", help="Local address to bind to"),
        ] = None,
    ) -> None:
        """Forward a local port to a pod.

        Examples:
            kdbg forward api 8080 80
            kdbg forward db 5432 5432 --address 0.0.0.0
        """
        _run(
            OperationKind.FORWARD,
            _lookup_scope(namespace),
            pod,
            ports=(local_port, pod_port),
            address=address,
        )
