"""Configuration models for kdbg with Pydantic validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

# XDG-compliant config location
CONFIG_DIR = Path.home() / ".config" / "kdbg"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_CONFIG_HEADER = """\
# kdbg Configuration
# Environment variables (KDBG_*) take precedence over values in this file.
"""


class KdbgConfig(BaseModel):
    """Complete kdbg configuration."""

    model_config = ConfigDict(extra="forbid")

    kubectl_path: str | None = None
    default_namespace: str | None = None
    debug_namespace: str = "default"
    debug_image: str = "busybox"
    debug_ready_timeout: int = 60
    debug_pod_ttl: int = 3600
    log_tail: int = 100
    request_timeout: int = 30
    shell_candidates: list[str] = ["/bin/bash", "/bin/sh"]
    similarity_threshold: float = 0.6
    log_level: str = "WARNING"

    @field_validator("debug_ready_timeout", "debug_pod_ttl", "request_timeout")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate timeouts are positive."""
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("log_tail")
    @classmethod
    def validate_log_tail(cls, v: int) -> int:
        """Validate log_tail is non-negative."""
        if v < 0:
            raise ValueError("log_tail must be non-negative")
        return v

    @field_validator("similarity_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Validate the similarity threshold lies in (0, 1]."""
        if not 0 < v <= 1:
            raise ValueError("similarity_threshold must be in (0, 1]")
        return v

    @field_validator("debug_namespace", "debug_image")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Validate required strings are not blank."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("default_namespace")
    @classmethod
    def validate_default_namespace(cls, v: str | None) -> str | None:
        """Treat a blank default namespace as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("shell_candidates")
    @classmethod
    def validate_shell_candidates(cls, v: list[str]) -> list[str]:
        """Validate at least one non-empty shell is configured."""
        shells = [s.strip() for s in v if s.strip()]
        if not shells:
            raise ValueError("shell_candidates must contain at least one shell")
        return shells

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalise the log level."""
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level '{v}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return level

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> KdbgConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            KDBG_KUBECTL: Path to the kubectl binary
            KDBG_NAMESPACE: Default namespace for pod lookups
            KDBG_DEBUG_NAMESPACE: Namespace for debug pods
            KDBG_DEBUG_IMAGE: Image for debug pods
            KDBG_DEBUG_READY_TIMEOUT: Seconds to wait for a debug pod to become ready
            KDBG_LOG_TAIL: Default number of log lines
            KDBG_REQUEST_TIMEOUT: Timeout in seconds for captured kubectl calls
            KDBG_SIMILARITY_THRESHOLD: Minimum similarity for fuzzy suggestions
        """
        config_dict = base_config.copy() if base_config else {}

        if kubectl := os.environ.get("KDBG_KUBECTL"):
            config_dict["kubectl_path"] = kubectl

        if namespace := os.environ.get("KDBG_NAMESPACE"):
            config_dict["default_namespace"] = namespace

        if debug_namespace := os.environ.get("KDBG_DEBUG_NAMESPACE"):
            config_dict["debug_namespace"] = debug_namespace

        if image := os.environ.get("KDBG_DEBUG_IMAGE"):
            config_dict["debug_image"] = image

        if ready_timeout := os.environ.get("KDBG_DEBUG_READY_TIMEOUT"):
            config_dict["debug_ready_timeout"] = int(ready_timeout)

        if tail := os.environ.get("KDBG_LOG_TAIL"):
            config_dict["log_tail"] = int(tail)

        if timeout := os.environ.get("KDBG_REQUEST_TIMEOUT"):
            config_dict["request_timeout"] = int(timeout)

        if threshold := os.environ.get("KDBG_SIMILARITY_THRESHOLD"):
            config_dict["similarity_threshold"] = float(threshold)

        return cls(**config_dict)

    def to_yaml(self) -> str:
        """Render the configuration as a commented YAML document."""
        body = yaml.safe_dump(self.model_dump(), default_flow_style=False, sort_keys=False)
        return f"{_CONFIG_HEADER}\n{body}"


def load_config(path: Path | None = None) -> KdbgConfig | None:
    """Load and validate the config file.

    Args:
        path: Config file path. Defaults to ``~/.config/kdbg/config.yaml``.

    Returns:
        The parsed configuration, or None if the file does not exist.

    Raises:
        ValueError: If the file cannot be read, is not valid YAML, or fails
            validation.
    """
    config_path = path or CONFIG_FILE
    if not config_path.exists():
        return None
    try:
        text = config_path.read_text()
    except OSError as e:
        raise ValueError(f"Cannot read {config_path}: {e}") from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML in {config_path}: expected a mapping")
    try:
        return KdbgConfig(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e


def resolve_config(path: Path | None = None) -> KdbgConfig:
    """Build the effective configuration: file values with env overrides.

    Raises:
        ValueError: If the config file or an environment override is invalid.
    """
    file_config = load_config(path)
    base = file_config.model_dump() if file_config is not None else {}
    return KdbgConfig.from_env(base)
