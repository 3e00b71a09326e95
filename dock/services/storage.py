"""Container record storage.

One JSON record per container under <dock_home>/containers/<name>.json.
Writes go through a temp file in the same directory followed by
os.replace, so readers see either the old record or the new one.
"""

import os
import tempfile
from pathlib import Path
from typing import List, Optional

import structlog
from pydantic import ValidationError

from ..config import Settings, settings as default_settings
from ..models import ContainerConfig, NotFoundError, StorageError

logger = structlog.get_logger(__name__)

RECORD_SUFFIX = ".json"


class ConfigStore:
    """Persists and retrieves one ContainerConfig per container name."""

    def __init__(self, config: Optional[Settings] = None):
        self._settings = config or default_settings
        # Resolved once; never re-read from settings afterwards
        self._base_dir = self._settings.containers_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def init(self) -> "ConfigStore":
        """Create the record directory if needed."""
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to create config directory {self._base_dir}: {e}"
            ) from e
        return self

    def close(self) -> None:
        """Flat-file storage holds no open resources."""
        pass

    def record_path(self, name: str) -> Path:
        return self._base_dir / f"{name}{RECORD_SUFFIX}"

    def exists(self, name: str) -> bool:
        return self.record_path(name).is_file()

    def save(self, config: ContainerConfig) -> None:
        """Create or overwrite the record for config.name atomically."""
        path = self.record_path(config.name)
        payload = config.model_dump_json(indent=2)
        tmp_name = None
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                dir=self._base_dir,
                prefix=f".{config.name}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            ) as fd:
                tmp_name = fd.name
                fd.write(payload)
                fd.flush()
                os.fsync(fd.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            logger.error("Failed to save container config", container=config.name, error=str(e))
            raise StorageError(f"Failed to save config for '{config.name}': {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass

        logger.debug("Saved container config", container=config.name, status=config.status.value)

    def load(self, name: str) -> ContainerConfig:
        path = self.record_path(name)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFoundError(name) from None
        except OSError as e:
            raise StorageError(f"Failed to read config for '{name}': {e}") from e

        try:
            return ContainerConfig.model_validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Corrupt config record for '{name}': {e}") from e

    def delete(self, name: str) -> None:
        try:
            self.record_path(name).unlink()
        except FileNotFoundError:
            raise NotFoundError(name) from None
        except OSError as e:
            raise StorageError(f"Failed to delete config for '{name}': {e}") from e
        logger.debug("Deleted container config", container=name)

    def list_all(self) -> List[ContainerConfig]:
        """Load every record. Order is unspecified."""
        if not self._base_dir.is_dir():
            return []

        configs = []
        for path in self._base_dir.glob(f"*{RECORD_SUFFIX}"):
            if path.name.startswith("."):
                continue
            try:
                configs.append(self.load(path.name[: -len(RECORD_SUFFIX)]))
            except NotFoundError:
                # Removed between the directory scan and the read
                continue
            except StorageError as e:
                logger.warning(
                    "Skipping corrupt container record",
                    container=path.stem,
                    error=str(e),
                )
                continue
        return configs
