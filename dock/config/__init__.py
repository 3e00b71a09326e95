"""Configuration management for dock.

A single Settings class reads flat fields from the environment (and an
optional .env file) and exposes them as logical groups.

Usage:
    from dock.config import settings

    # Grouped access
    settings.sandbox.sandbox_binary
    settings.logging.log_level

    # Flat access
    settings.sandbox_binary
    settings.containers_dir
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .sandbox import SandboxConfig
from .logging import LoggingConfig
from .runtimes import (
    RUNTIMES,
    RuntimeConfig,
    RuntimeTag,
    get_runtime,
    get_runtime_executable,
    parse_runtime_tag,
)


class Settings(BaseSettings):
    """dock settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Storage layout
    dock_home: str = Field(
        default="~/.dock",
        description="Configuration root holding records, roots, logs and locks",
    )

    # Sandbox (proot) configuration
    sandbox_binary: str = Field(
        default="proot",
        description="External sandbox tool used to confine workloads",
    )
    sandbox_root_flag: str = Field(
        default="-r",
        description="Flag that precedes the confinement root in the sandbox argv",
    )
    container_tag_var: str = Field(
        default="DOCK_CONTAINER",
        description="Environment variable carrying the container name tag",
    )
    port_map_var: str = Field(
        default="DOCK_PORT_MAP",
        description="Environment variable carrying the port-mapping hint",
    )
    root_env_var: str = Field(
        default="DOCK_ROOT",
        description="Environment variable exposing the root to enter shells",
    )
    stop_timeout_seconds: float = Field(
        default=5.0,
        ge=0,
        le=300,
        description="Grace period between SIGTERM and SIGKILL on stop",
    )

    # Logging configuration
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="console")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure the log level is one structlog can filter on."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure the log format is console or json."""
        fmt = v.lower()
        if fmt not in ("console", "json"):
            raise ValueError("log_format must be 'console' or 'json'")
        return fmt

    # ========================================================================
    # GROUPED CONFIG ACCESS
    # ========================================================================

    @property
    def sandbox(self) -> SandboxConfig:
        """Access sandbox configuration group."""
        return SandboxConfig(
            sandbox_binary=self.sandbox_binary,
            sandbox_root_flag=self.sandbox_root_flag,
            container_tag_var=self.container_tag_var,
            port_map_var=self.port_map_var,
            root_env_var=self.root_env_var,
            stop_timeout_seconds=self.stop_timeout_seconds,
        )

    @property
    def logging(self) -> LoggingConfig:
        """Access logging configuration group."""
        return LoggingConfig(
            log_level=self.log_level,
            log_format=self.log_format,
        )

    # ========================================================================
    # PATH HELPERS
    # ========================================================================

    @property
    def home_path(self) -> Path:
        """Configuration root with ~ expanded."""
        return Path(self.dock_home).expanduser()

    @property
    def containers_dir(self) -> Path:
        return self.home_path / "containers"

    @property
    def rootfs_dir(self) -> Path:
        return self.home_path / "rootfs"

    @property
    def logs_dir(self) -> Path:
        return self.home_path / "logs"

    @property
    def locks_dir(self) -> Path:
        return self.home_path / "locks"


# Global settings instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    # Grouped configs
    "SandboxConfig",
    "LoggingConfig",
    # Runtime configuration
    "RUNTIMES",
    "RuntimeConfig",
    "RuntimeTag",
    "get_runtime",
    "get_runtime_executable",
    "parse_runtime_tag",
]
