"""Tag-based lookup and termination of sandbox processes.

No PID is persisted anywhere. A container's processes are the ones whose
environment carries the container tag with a value exactly equal to the
container name.
"""

import os
from typing import List, Optional, Set

import psutil
import structlog

from ...config import Settings, settings as default_settings

logger = structlog.get_logger(__name__)


def _own_lineage() -> Set[int]:
    """PIDs of this process and its ancestors.

    A `dock stop` run from inside `dock enter` inherits the tag and must not
    match itself or the shell it runs in.
    """
    pids = {os.getpid()}
    try:
        for parent in psutil.Process().parents():
            pids.add(parent.pid)
    except psutil.Error:
        pass
    return pids


class ProcessLocator:
    """Finds and signals processes by container tag."""

    def __init__(self, config: Optional[Settings] = None):
        self._sandbox = (config or default_settings).sandbox

    @property
    def tag_var(self) -> str:
        return self._sandbox.container_tag_var

    def find_by_tag(self, name: str) -> List[psutil.Process]:
        """Return live processes tagged with the container name.

        Processes that exit during the scan, zombies, and processes whose
        environment is not readable by this user are skipped.
        """
        excluded = _own_lineage()
        matches = []
        for proc in psutil.process_iter(["pid"]):
            if proc.pid in excluded:
                continue
            try:
                if proc.environ().get(self.tag_var) == name:
                    matches.append(proc)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return matches

    def terminate_by_tag(self, name: str, timeout: Optional[float] = None) -> List[int]:
        """Terminate every process tagged with the container name.

        Sends SIGTERM, waits up to `timeout` seconds (default
        settings.stop_timeout_seconds), then SIGKILLs survivors. Finding no
        process is not an error.

        Returns:
            PIDs that were signalled
        """
        if timeout is None:
            timeout = self._sandbox.stop_timeout_seconds

        procs = self.find_by_tag(name)
        if not procs:
            logger.info("No tagged processes found", container=name)
            return []

        signalled = []
        for proc in procs:
            try:
                proc.terminate()
                signalled.append(proc.pid)
            except psutil.NoSuchProcess:
                continue

        _, alive = psutil.wait_procs(procs, timeout=timeout)
        for proc in alive:
            logger.warning("Process ignored SIGTERM, killing", container=name, pid=proc.pid)
            try:
                proc.kill()
            except psutil.NoSuchProcess:
                continue

        logger.info("Terminated tagged processes", container=name, pids=signalled)
        return signalled
