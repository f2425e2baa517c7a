"""Logging configuration for kdbg."""

from kdbg.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
