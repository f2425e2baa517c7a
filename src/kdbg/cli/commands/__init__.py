"""kdbg CLI commands."""

from kdbg.cli.commands.pods import register_pod_commands

__all__ = ["register_pod_commands"]
