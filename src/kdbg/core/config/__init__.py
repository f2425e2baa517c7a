"""Configuration management with Pydantic validation."""

from kdbg.core.config.models import (
    CONFIG_DIR,
    CONFIG_FILE,
    KdbgConfig,
    load_config,
    resolve_config,
)

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "KdbgConfig",
    "load_config",
    "resolve_config",
]
