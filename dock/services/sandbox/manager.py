"""Container root directory and log file management."""

import shutil
from pathlib import Path
from typing import Optional

import structlog

from ...config import Settings, settings as default_settings
from ...models import StorageError

logger = structlog.get_logger(__name__)


class RootManager:
    """Manages per-container filesystem roots and log files.

    Paths are pure functions of the container name; nothing here reads
    or writes container records.
    """

    def __init__(self, config: Optional[Settings] = None):
        """Initialize the root manager."""
        self._settings = config or default_settings
        self._rootfs_dir = self._settings.rootfs_dir
        self._logs_dir = self._settings.logs_dir

    def is_available(self) -> bool:
        """Check if the sandbox binary is available."""
        return shutil.which(self._settings.sandbox_binary) is not None

    def get_initialization_error(self) -> Optional[str]:
        """Get a readable reason why workloads cannot be launched, if any."""
        if not self.is_available():
            return (
                f"Sandbox binary not found: {self._settings.sandbox_binary}. "
                "Ensure proot is installed and in PATH."
            )
        return None

    def root_path(self, name: str) -> Path:
        return self._rootfs_dir / name

    def log_path(self, name: str) -> Path:
        return self._logs_dir / f"{name}.log"

    def ensure_root(self, name: str) -> Path:
        """Create the container root (and the log directory) if absent.

        Returns:
            Path of the root directory
        """
        root = self.root_path(name)
        try:
            root.mkdir(parents=True, exist_ok=True)
            self._logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create container root", container=name, error=str(e))
            raise StorageError(f"Failed to create root for '{name}': {e}") from e

        logger.debug("Ensured container root", container=name, root=str(root))
        return root

    def destroy_root(self, name: str) -> None:
        """Remove the root tree and the log file.

        Missing paths are not an error; any other failure is raised.
        """
        root = self.root_path(name)
        log_file = self.log_path(name)
        try:
            if root.exists():
                shutil.rmtree(str(root))
            log_file.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to destroy container root", container=name, error=str(e))
            raise StorageError(f"Failed to remove files for '{name}': {e}") from e

        logger.debug("Destroyed container root", container=name)

    def read_log(self, name: str) -> Optional[str]:
        """Read the full log of a container.

        Returns:
            Log content, or None if the container never produced a log
        """
        log_file = self.log_path(name)
        try:
            data = log_file.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read logs for '{name}': {e}") from e
        return data.decode("utf-8", errors="replace")
