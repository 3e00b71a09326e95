"""Container lifecycle management.

ContainerManager is the public surface of dock: it composes the record
store, root manager, launcher and locator into create, start, stop, list,
enter, logs, remove and status.

Ordering invariant for start and stop: the new status is persisted before
the process action is attempted. The record therefore reflects the last
requested state. If a launch fails after the write, the record says
`running` while no process exists; `status --verify` reports this and a
manual `stop` then `start` reconciles it. Nothing is rolled back.
"""

import os
import subprocess
import uuid
from pathlib import Path
from typing import List, Optional

import structlog

from ...config import Settings, settings as default_settings
from ...models import (
    AlreadyExistsError,
    AlreadyRunningError,
    AlreadyStoppedError,
    CannotRemoveRunningError,
    ContainerConfig,
    ContainerStatus,
    InvalidNameError,
    LaunchError,
    NotFoundError,
    ScriptNotFoundError,
    StatusReport,
    StorageError,
    validate_container_name,
)
from ..locks import ContainerLocks
from ..runtime import detect_runtime
from ..sandbox import ProcessHandle, ProcessLocator, ProotConfig, RootManager, SandboxLauncher
from ..shell import resolve_shell
from ..storage import ConfigStore

logger = structlog.get_logger(__name__)


class ContainerManager:
    """Orchestrates the container lifecycle.

    Every mutating operation holds the per-name advisory lock around its
    load -> mutate -> save sequence and reloads state from the store.
    """

    def __init__(
        self,
        store: Optional[ConfigStore] = None,
        roots: Optional[RootManager] = None,
        launcher: Optional[SandboxLauncher] = None,
        locator: Optional[ProcessLocator] = None,
        locks: Optional[ContainerLocks] = None,
        config: Optional[Settings] = None,
    ):
        self._settings = config or default_settings
        self._store = store or ConfigStore(self._settings).init()
        self._roots = roots or RootManager(self._settings)
        self._launcher = launcher or SandboxLauncher(ProotConfig(self._settings))
        self._locator = locator or ProcessLocator(self._settings)
        self._locks = locks or ContainerLocks(self._settings)

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def roots(self) -> RootManager:
        return self._roots

    def get_initialization_error(self) -> Optional[str]:
        return self._roots.get_initialization_error()

    def _existing_name(self, name: str) -> str:
        """Names that fail validation can never have been created."""
        try:
            return validate_container_name(name)
        except InvalidNameError:
            raise NotFoundError(name) from None

    def create(self, name: str, script: str) -> ContainerConfig:
        """Create a stopped container for a script.

        Raises:
            InvalidNameError, AlreadyExistsError, ScriptNotFoundError,
            DetectionError, StorageError
        """
        validate_container_name(name)

        with self._locks.hold(name):
            if self._store.exists(name):
                raise AlreadyExistsError(name)

            script_path = Path(script).expanduser()
            if not script_path.exists():
                raise ScriptNotFoundError(script)

            runtime = detect_runtime(script_path)
            config = ContainerConfig(
                id=str(uuid.uuid4()),
                name=name,
                script=str(script_path.resolve()),
                runtime_version=runtime.value,
                status=ContainerStatus.STOPPED,
            )
            self._store.save(config)

            try:
                self._roots.ensure_root(name)
            except StorageError:
                self._store.delete(name)
                raise

        logger.info("Container created", container=name, runtime=runtime.value)
        return config

    def start(self, name: str, port: Optional[str] = None) -> ProcessHandle:
        """Mark a container running, then launch its workload.

        Raises:
            NotFoundError, AlreadyRunningError, ScriptNotFoundError,
            LaunchError, StorageError
        """
        self._existing_name(name)

        with self._locks.hold(name):
            config = self._store.load(name)
            if config.is_running:
                raise AlreadyRunningError(name)
            if not Path(config.script).exists():
                raise ScriptNotFoundError(config.script, container=name)

            config.status = ContainerStatus.RUNNING
            config.port_mapping = port
            self._store.save(config)

            root = self._roots.ensure_root(name)
            handle = self._launcher.launch(
                config, root, self._roots.log_path(name), port
            )

        logger.info("Container started", container=name, pid=handle.pid, port=port)
        return handle

    def stop(self, name: str) -> List[int]:
        """Mark a container stopped, then terminate its tagged processes.

        Returns:
            PIDs that were signalled (possibly empty)

        Raises:
            NotFoundError, AlreadyStoppedError, StorageError
        """
        self._existing_name(name)

        with self._locks.hold(name):
            config = self._store.load(name)
            if not config.is_running:
                raise AlreadyStoppedError(name)

            config.status = ContainerStatus.STOPPED
            self._store.save(config)

            pids = self._locator.terminate_by_tag(name)

        logger.info("Container stopped", container=name, pids=pids)
        return pids

    def list(self) -> List[ContainerConfig]:
        """All containers sorted by name."""
        return sorted(self._store.list_all(), key=lambda c: c.name)

    def enter(self, name: str) -> int:
        """Run an interactive shell in the container root until it exits.

        Returns:
            Exit status of the shell

        Raises:
            NotFoundError, LaunchError
        """
        self._existing_name(name)
        if not self._store.exists(name):
            raise NotFoundError(name)

        root = self._roots.ensure_root(name)
        shell = resolve_shell()

        env = dict(os.environ)
        env[self._settings.container_tag_var] = name
        env[self._settings.root_env_var] = str(root)

        logger.debug("Entering container", container=name, shell=shell)
        try:
            completed = subprocess.run([shell], cwd=str(root), env=env)
        except OSError as e:
            raise LaunchError(f"Failed to start shell '{shell}': {e}", container=name) from e
        return completed.returncode

    def logs(self, name: str) -> Optional[str]:
        """Full log content, or None when no log exists."""
        try:
            validate_container_name(name)
        except InvalidNameError:
            return None
        return self._roots.read_log(name)

    def remove(self, name: str) -> ContainerConfig:
        """Delete a stopped container's root, log and record.

        Raises:
            NotFoundError, CannotRemoveRunningError, StorageError
        """
        self._existing_name(name)

        with self._locks.hold(name):
            config = self._store.load(name)
            if config.is_running:
                raise CannotRemoveRunningError(name)

            self._roots.destroy_root(name)
            self._store.delete(name)

        logger.info("Container removed", container=name)
        return config

    def status(self, name: str, verify: bool = False) -> StatusReport:
        """Report the persisted status, optionally checked against live processes.

        Raises:
            NotFoundError
        """
        self._existing_name(name)
        config = self._store.load(name)

        report = StatusReport(name=name, persisted_status=config.status)
        if verify:
            report.live_pids = [p.pid for p in self._locator.find_by_tag(name)]
            report.verified = True
            if not report.consistent:
                logger.warning(
                    "Persisted status does not match live processes",
                    container=name,
                    status=config.status.value,
                    live_pids=report.live_pids,
                )
        return report
