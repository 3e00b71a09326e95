"""proot argument builder and process handle dataclass.

ProcessHandle is the ephemeral handle for a launched workload. ProotConfig
builds the argv and environment for invoking the sandbox tool.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import structlog

from ...config import Settings, settings as default_settings
from ...config.runtimes import get_runtime_executable

logger = structlog.get_logger(__name__)


@dataclass
class ProcessHandle:
    """Represents a launched sandbox process.

    Only returned to the caller for display. The PID is never persisted;
    the process is found again through its container tag.
    """

    pid: int
    container_name: str
    command: List[str]
    log_path: Path
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ProotConfig:
    """Builds sandbox tool arguments and the child environment from settings."""

    def __init__(self, config: Optional[Settings] = None):
        self._sandbox = (config or default_settings).sandbox

    @property
    def binary(self) -> str:
        return self._sandbox.sandbox_binary

    def build_args(
        self,
        root: str,
        runtime_version: str,
        script: str,
    ) -> List[str]:
        """Build the full sandbox argv.

        Args:
            root: Container root used as the confinement boundary
            runtime_version: Stored runtime tag of the container
            script: Path of the entry-point script

        Returns:
            argv list starting with the sandbox binary
        """
        executable = get_runtime_executable(runtime_version)
        return [
            self._sandbox.sandbox_binary,
            self._sandbox.sandbox_root_flag,
            str(root),
            executable,
            str(script),
        ]

    def build_env(
        self,
        name: str,
        port_mapping: Optional[str] = None,
        base_env: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        """Build the child environment.

        The caller's environment is inherited. The container tag is always
        set; the port-mapping hint only when a mapping was supplied.
        """
        env = dict(os.environ if base_env is None else base_env)
        # A stale hint inherited from the caller must not leak into the child
        env.pop(self._sandbox.port_map_var, None)
        if port_mapping:
            env[self._sandbox.port_map_var] = port_mapping
        env[self._sandbox.container_tag_var] = name
        return env
