"""Workload launching through the sandbox tool.

Spawns the sandbox binary detached from the dock process, with stdout and
stderr of the workload combined into the container's log file.
"""

import subprocess
from pathlib import Path
from typing import Optional

import structlog

from ...models import ContainerConfig, LaunchError, ScriptNotFoundError, StorageError
from .proot import ProcessHandle, ProotConfig

logger = structlog.get_logger(__name__)


class SandboxLauncher:
    """Launches container workloads inside the sandbox tool.

    The launched process is never waited on; `start` returns while the
    workload keeps running in the background.
    """

    def __init__(self, proot_config: ProotConfig):
        """Initialize launcher with proot config.

        Args:
            proot_config: Builder for sandbox argv and environment
        """
        self._proot_config = proot_config

    def launch(
        self,
        config: ContainerConfig,
        root: Path,
        log_path: Path,
        port_mapping: Optional[str] = None,
    ) -> ProcessHandle:
        """Launch the container's script in the sandbox.

        Args:
            config: Container record (runtime tag and script are read from it)
            root: Container root used as the confinement boundary
            log_path: Log file receiving stdout and stderr, truncated first
            port_mapping: Optional host:container mapping hint

        Returns:
            Ephemeral ProcessHandle

        Raises:
            ScriptNotFoundError: the script path no longer exists
            LaunchError: the sandbox tool could not be spawned
        """
        if not Path(config.script).exists():
            raise ScriptNotFoundError(config.script, container=config.name)

        command = self._proot_config.build_args(
            root=str(root),
            runtime_version=config.runtime_version,
            script=config.script,
        )
        env = self._proot_config.build_env(config.name, port_mapping)

        try:
            log_file = open(log_path, "wb")
        except OSError as e:
            raise StorageError(f"Failed to open log file {log_path}: {e}") from e

        try:
            with log_file:
                proc = subprocess.Popen(
                    command,
                    stdin=subprocess.DEVNULL,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    env=env,
                    start_new_session=True,  # Survives the dock process exiting
                    close_fds=True,
                )
        except OSError as e:
            logger.error(
                "Sandbox launch failed",
                container=config.name,
                binary=self._proot_config.binary,
                error=str(e),
            )
            raise LaunchError(
                f"Failed to launch '{self._proot_config.binary}' for container "
                f"'{config.name}': {e}",
                container=config.name,
            ) from e

        logger.info(
            "Launched sandbox process",
            container=config.name,
            pid=proc.pid,
            runtime=config.runtime_version,
        )

        return ProcessHandle(
            pid=proc.pid,
            container_name=config.name,
            command=command,
            log_path=log_path,
        )
