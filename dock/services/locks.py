"""Per-container advisory locks.

Serialises load -> mutate -> save sequences across separate dock
invocations that target the same container name.
"""

import fcntl
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import structlog

from ..config import Settings, settings as default_settings
from ..models import StorageError

logger = structlog.get_logger(__name__)


class ContainerLocks:
    """Hands out exclusive flock()-based locks keyed by container name."""

    def __init__(self, config: Optional[Settings] = None):
        self._settings = config or default_settings
        self._base_dir = self._settings.locks_dir

    def lock_path(self, name: str) -> Path:
        return self._base_dir / f"{name}.lock"

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        """Block until the lock for name is held, release on exit.

        Lock files are left in place after release; removing them would
        let a waiter lock an unlinked inode.
        """
        path = self.lock_path(name)
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
            handle = open(path, "a+")
        except OSError as e:
            raise StorageError(f"Failed to open lock file {path}: {e}") from e

        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            logger.debug("Acquired container lock", container=name)
            yield
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
            handle.close()
