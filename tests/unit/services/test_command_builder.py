"""Unit tests for kubectl command construction."""

from __future__ import annotations

from typing import Any

import pytest

from kdbg.core.exceptions import InvalidOptionError
from kdbg.integrations.kubectl.models import ALL_NAMESPACES
from kdbg.services.command_builder import (
    MANAGED_BY_LABEL,
    CommandBuilder,
    OperationKind,
    OperationRequest,
    parse_port,
)


@pytest.fixture
def builder() -> CommandBuilder:
    """Create a CommandBuilder."""
    return CommandBuilder()


def _request(kind: OperationKind, namespace: str = "default", **options: Any) -> OperationRequest:
    return OperationRequest(kind=kind, namespace=namespace, target="frag", options=options)


# ===========================================================================
# TestOperationRequest
# ===========================================================================


@pytest.mark.unit
class TestOperationRequest:
    """Tests for the request value object."""

    def test_options_are_read_only(self) -> None:
        request = _request(OperationKind.LOGS, tail=5)

        with pytest.raises(TypeError):
            request.options["tail"] = 10  # type: ignore[index]

    def test_with_namespace_returns_scoped_copy(self) -> None:
        request = _request(OperationKind.LOGS, namespace=ALL_NAMESPACES, tail=5)

        scoped = request.with_namespace("payments")

        assert scoped.namespace == "payments"
        assert scoped.options["tail"] == 5
        assert request.namespace == ALL_NAMESPACES

    def test_option_treats_none_as_unset(self) -> None:
        request = _request(OperationKind.LOGS, since=None)

        assert request.option("since", "1h") == "1h"

    @pytest.mark.parametrize(
        ("kind", "options", "expected"),
        [
            (OperationKind.LOGS, {}, False),
            (OperationKind.LOGS, {"follow": True}, True),
            (OperationKind.EXEC, {}, True),
            (OperationKind.SHELL, {}, True),
            (OperationKind.DEBUG, {}, True),
            (OperationKind.FORWARD, {}, True),
            (OperationKind.DESCRIBE, {}, False),
            (OperationKind.EVENTS, {}, False),
        ],
    )
    def test_streaming(self, kind: OperationKind, options: dict[str, Any], expected: bool) -> None:
        assert _request(kind, **options).streaming is expected

    def test_top_requires_target_only_when_given(self) -> None:
        with_target = OperationRequest(kind=OperationKind.TOP, namespace="default", target="api")
        without_target = OperationRequest(kind=OperationKind.TOP, namespace="default")

        assert with_target.requires_target
        assert not without_target.requires_target


# ===========================================================================
# TestBuild
# ===========================================================================


@pytest.mark.unit
class TestBuild:
    """Tests for CommandBuilder.build per operation kind."""

    def test_list(self, builder: CommandBuilder) -> None:
        assert builder.build(_request(OperationKind.LIST)) == ["get", "pods", "-n", "default"]

    def test_list_verbose_all_namespaces(self, builder: CommandBuilder) -> None:
        request = _request(OperationKind.LIST, namespace=ALL_NAMESPACES, verbose=True)

        assert builder.build(request) == ["get", "pods", "--all-namespaces", "-o", "wide"]

    def test_logs_defaults(self, builder: CommandBuilder) -> None:
        args = builder.build(_request(OperationKind.LOGS), "api-1")

        assert args == ["logs", "api-1", "-n", "default", "--tail", "100"]

    def test_logs_all_options(self, builder: CommandBuilder) -> None:
        request = _request(
            OperationKind.LOGS,
            tail=20,
            follow=True,
            container="sidecar",
            previous=True,
            timestamps=True,
            since="1h30m",
        )

        args = builder.build(request, "api-1")

        assert args == [
            "logs",
            "api-1",
            "-n",
            "default",
            "--tail",
            "20",
            "-f",
            "-c",
            "sidecar",
            "--previous",
            "--timestamps",
            "--since=1h30m",
        ]

    def test_exec_default_command(self, builder: CommandBuilder) -> None:
        args = builder.build(_request(OperationKind.EXEC), "api-1")

        assert args == ["exec", "-it", "api-1", "-n", "default", "--", "/bin/sh"]

    def test_exec_splits_command_string(self, builder: CommandBuilder) -> None:
        request = _request(OperationKind.EXEC, command="ls -la '/var/log app'", tty=False)

        args = builder.build(request, "api-1")

        assert args == ["exec", "-i", "api-1", "-n", "default", "--", "ls", "-la", "/var/log app"]

    def test_exec_accepts_argv_list_and_container(self, builder: CommandBuilder) -> None:
        request = _request(OperationKind.EXEC, command=["cat", "/etc/hosts"], container="app")

        args = builder.build(request, "api-1")

        assert args == [
            "exec",
            "-it",
            "api-1",
            "-n",
            "default",
            "-c",
            "app",
            "--",
            "cat",
            "/etc/hosts",
        ]

    def test_shell(self, builder: CommandBuilder) -> None:
        request = _request(OperationKind.SHELL, shell="/bin/bash", container="app")

        args = builder.build(request, "api-1")

        assert args == ["exec", "-it", "api-1", "-n", "default", "-c", "app", "--", "/bin/bash"]

    def test_shell_check_has_no_tty(self, builder: CommandBuilder) -> None:
        args = builder.shell_check_args("api-1", "default", "/bin/bash", " app ")

        assert args == [
            "exec",
            "api-1",
            "-n",
            "default",
            "-c",
            "app",
            "--",
            "/bin/bash",
            "-c",
            "exit 0",
        ]

    def test_debug_attach(self, builder: CommandBuilder) -> None:
        request = _request(OperationKind.DEBUG, image="busybox")

        args = builder.build(request, "debug-1700000000")

        assert args == ["exec", "-it", "debug-1700000000", "-n", "default", "--", "/bin/sh"]

    def test_describe(self, builder: CommandBuilder) -> None:
        args = builder.build(_request(OperationKind.DESCRIBE), "api-1")

        assert args == ["describe", "pod", "api-1", "-n", "default"]

    def test_top_all_pods(self, builder: CommandBuilder) -> None:
        request = _request(OperationKind.TOP, namespace=ALL_NAMESPACES, containers=True)

        assert builder.build(request) == ["top", "pods", "--all-namespaces", "--containers"]

    def test_top_single_pod(self, builder: CommandBuilder) -> None:
        args = builder.build(_request(OperationKind.TOP), "api-1")

        assert args == ["top", "pod", "api-1", "-n", "default"]

    def test_forward(self, builder: CommandBuilder) -> None:
        request = _request(OperationKind.FORWARD, ports=("8080", 80), address="0.0.0.0")

        args = builder.build(request, "api-1")

        assert args == [
            "port-forward",
            "api-1",
            "8080:80",
            "-n",
            "default",
            "--address",
            "0.0.0.0",
        ]

    def test_restart(self, builder: CommandBuilder) -> None:
        args = builder.build(_request(OperationKind.RESTART), "api-1")

        assert args == ["delete", "pod", "api-1", "-n", "default"]

    def test_events(self, builder: CommandBuilder) -> None:
        args = builder.build(_request(OperationKind.EVENTS, namespace="payments"), "api-1")

        assert args == [
            "get",
            "events",
            "-n",
            "payments",
            "--field-selector",
            "involvedObject.name=api-1",
            "--sort-by",
            ".lastTimestamp",
        ]

    def test_targeted_kind_without_name_is_rejected(self, builder: CommandBuilder) -> None:
        with pytest.raises(InvalidOptionError) as exc_info:
            builder.build(_request(OperationKind.DESCRIBE))

        assert exc_info.value.option == "pod"

    def test_targeted_kind_needs_concrete_namespace(self, builder: CommandBuilder) -> None:
        with pytest.raises(InvalidOptionError, match="namespace"):
            builder.build(_request(OperationKind.DESCRIBE, namespace=ALL_NAMESPACES), "api-1")


# ===========================================================================
# TestValidation
# ===========================================================================


@pytest.mark.unit
class TestValidation:
    """Tests for option validation."""

    @pytest.mark.parametrize(
        "ports",
        [
            ("abc", "80"),
            ("0", "80"),
            ("-1", "80"),
            ("8080", "65536"),
            ("8080",),
            ("8080", "80", "90"),
            None,
            "8080:80",
            (True, 80),
        ],
    )
    def test_forward_rejects_bad_ports(self, builder: CommandBuilder, ports: Any) -> None:
        with pytest.raises(InvalidOptionError):
            builder.validate(_request(OperationKind.FORWARD, ports=ports))

    def test_forward_rejects_blank_address(self, builder: CommandBuilder) -> None:
        with pytest.raises(InvalidOptionError, match="address"):
            builder.validate(_request(OperationKind.FORWARD, ports=(1, 2), address="  "))

    @pytest.mark.parametrize("tail", [-1, "ten", True])
    def test_logs_rejects_bad_tail(self, builder: CommandBuilder, tail: Any) -> None:
        with pytest.raises(InvalidOptionError, match="tail"):
            builder.validate(_request(OperationKind.LOGS, tail=tail))

    def test_logs_accepts_zero_tail(self, builder: CommandBuilder) -> None:
        builder.validate(_request(OperationKind.LOGS, tail=0))

    @pytest.mark.parametrize("since", ["yesterday", "10", "1d", ""])
    def test_logs_rejects_bad_since(self, builder: CommandBuilder, since: str) -> None:
        with pytest.raises(InvalidOptionError, match="since"):
            builder.validate(_request(OperationKind.LOGS, since=since))

    @pytest.mark.parametrize("command", ["", "   ", "echo 'unterminated", []])
    def test_exec_rejects_empty_or_unparseable_command(
        self, builder: CommandBuilder, command: Any
    ) -> None:
        with pytest.raises(InvalidOptionError, match="command"):
            builder.validate(_request(OperationKind.EXEC, command=command))

    def test_shell_rejects_empty_shell(self, builder: CommandBuilder) -> None:
        with pytest.raises(InvalidOptionError, match="shell"):
            builder.validate(_request(OperationKind.SHELL, shell=""))

    def test_rejects_empty_container(self, builder: CommandBuilder) -> None:
        with pytest.raises(InvalidOptionError, match="container"):
            builder.validate(_request(OperationKind.LOGS, container=" "))

    def test_debug_rejects_empty_image(self, builder: CommandBuilder) -> None:
        with pytest.raises(InvalidOptionError, match="image"):
            builder.validate(_request(OperationKind.DEBUG, image=""))

    def test_debug_rejects_all_namespaces(self, builder: CommandBuilder) -> None:
        with pytest.raises(InvalidOptionError, match="namespace"):
            builder.validate(_request(OperationKind.DEBUG, namespace=ALL_NAMESPACES, image="x"))

    def test_rejects_empty_namespace(self, builder: CommandBuilder) -> None:
        with pytest.raises(InvalidOptionError, match="namespace"):
            builder.validate(_request(OperationKind.LIST, namespace=""))

    def test_invalid_option_exit_code(self, builder: CommandBuilder) -> None:
        with pytest.raises(InvalidOptionError) as exc_info:
            builder.validate(_request(OperationKind.FORWARD, ports=("x", "y")))

        assert exc_info.value.exit_code == 2


@pytest.mark.unit
class TestParsePort:
    """Tests for parse_port."""

    @pytest.mark.parametrize(("value", "expected"), [("1", 1), (65535, 65535), (" 8080 ", 8080)])
    def test_valid_ports(self, value: Any, expected: int) -> None:
        assert parse_port("port", value) == expected

    def test_reason_names_the_range(self) -> None:
        with pytest.raises(InvalidOptionError) as exc_info:
            parse_port("local_port", 70000)

        assert exc_info.value.option == "local_port"
        assert "1-65535" in exc_info.value.reason


# ===========================================================================
# TestDebugPodArgs
# ===========================================================================


@pytest.mark.unit
class TestDebugPodArgs:
    """Tests for debug pod lifecycle commands."""

    def test_create_args(self, builder: CommandBuilder) -> None:
        args = builder.debug_create_args("debug-1", "default", "busybox", 3600)

        assert args == [
            "run",
            "debug-1",
            "--image",
            "busybox",
            "-n",
            "default",
            "--restart=Never",
            "--labels",
            MANAGED_BY_LABEL,
            "--command",
            "--",
            "sleep",
            "3600",
        ]

    def test_wait_args(self, builder: CommandBuilder) -> None:
        assert builder.debug_wait_args("debug-1", "default", 60) == [
            "wait",
            "--for=condition=Ready",
            "pod/debug-1",
            "-n",
            "default",
            "--timeout=60s",
        ]

    def test_delete_args(self, builder: CommandBuilder) -> None:
        assert builder.debug_delete_args("debug-1", "default") == [
            "delete",
            "pod",
            "debug-1",
            "-n",
            "default",
            "--ignore-not-found",
            "--wait=false",
        ]
