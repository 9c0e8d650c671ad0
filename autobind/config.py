"""
Configuration management for autobind.

Containers work without any configuration. ContainerConfig reads optional
overrides from the environment; ContainerSettings is the pydantic-settings
equivalent for applications that already configure themselves that way.
"""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{name} must be a boolean flag, got {raw!r}", config_key=name, config_value=raw
    )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}", config_key=name, config_value=raw
        ) from e


class ContainerConfig:
    """
    Container configuration.

    Every option falls back to an environment variable, then to its default.

    Example:
        # Using environment variables
        container = Container(config=ContainerConfig())

        # Or using direct parameters
        container = Container(config=ContainerConfig(detect_cycles=False))
    """

    def __init__(
        self,
        detect_cycles: bool | None = None,
        thread_safe: bool | None = None,
        log_resolutions: bool | None = None,
        metrics_max_entries: int | None = None,
    ):
        """
        Initialize configuration.

        Args:
            detect_cycles: Fail fast on circular dependencies instead of
                recursing until RecursionError (defaults to true or
                AUTOBIND_DETECT_CYCLES)
            thread_safe: Serialise singleton construction so only one
                instance is ever built (defaults to true or AUTOBIND_THREAD_SAFE)
            log_resolutions: Log every top-level resolve() with its duration
                (defaults to false or AUTOBIND_LOG_RESOLUTIONS)
            metrics_max_entries: Bound for a container-owned metrics collector
                (defaults to 10000 or AUTOBIND_METRICS_MAX_ENTRIES)
        """
        self.detect_cycles = (
            detect_cycles
            if detect_cycles is not None
            else _env_flag("AUTOBIND_DETECT_CYCLES", True)
        )
        self.thread_safe = (
            thread_safe if thread_safe is not None else _env_flag("AUTOBIND_THREAD_SAFE", True)
        )
        self.log_resolutions = (
            log_resolutions
            if log_resolutions is not None
            else _env_flag("AUTOBIND_LOG_RESOLUTIONS", False)
        )
        self.metrics_max_entries = (
            metrics_max_entries
            if metrics_max_entries is not None
            else _env_int("AUTOBIND_METRICS_MAX_ENTRIES", 10000)
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If a value is out of range
        """
        if self.metrics_max_entries < 1:
            raise ConfigurationError(
                f"metrics_max_entries must be >= 1, got {self.metrics_max_entries}",
                config_key="metrics_max_entries",
                config_value=self.metrics_max_entries,
            )

    def __repr__(self) -> str:
        return (
            f"ContainerConfig(detect_cycles={self.detect_cycles}, "
            f"thread_safe={self.thread_safe}, log_resolutions={self.log_resolutions}, "
            f"metrics_max_entries={self.metrics_max_entries})"
        )


class ContainerSettings(BaseSettings):
    """
    Pydantic-based configuration with automatic validation.

    Reads AUTOBIND_* variables. A .env file is only read when the caller
    passes one, e.g. ``ContainerSettings(_env_file=".env")``.

    Usage:
        settings = ContainerSettings()
        container = Container(config=settings.to_config())
    """

    detect_cycles: bool = Field(True, description="Fail fast on circular dependencies")
    thread_safe: bool = Field(True, description="Serialise singleton construction")
    log_resolutions: bool = Field(False, description="Log every top-level resolve()")
    metrics_max_entries: int = Field(
        10000, ge=1, description="Bound for a container-owned metrics collector"
    )

    model_config = SettingsConfigDict(env_prefix="AUTOBIND_", extra="ignore")

    def to_config(self) -> ContainerConfig:
        """Convert to the plain ContainerConfig consumed by Container."""
        return ContainerConfig(
            detect_cycles=self.detect_cycles,
            thread_safe=self.thread_safe,
            log_resolutions=self.log_resolutions,
            metrics_max_entries=self.metrics_max_entries,
        )
