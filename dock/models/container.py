"""Container data models.

ContainerConfig is the only lifecycle state kept on disk. Nothing holds a
long-lived copy of it: every operation reloads the record from the store.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .errors import InvalidNameError

NAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]{0,63}$"
_NAME_RE = re.compile(NAME_PATTERN)


class ContainerStatus(str, Enum):
    """Durable lifecycle state of a container."""

    STOPPED = "stopped"
    RUNNING = "running"


class ContainerConfig(BaseModel):
    """Persisted record for one container, keyed by name."""

    id: str = Field(..., description="Opaque unique identifier, never reused")
    name: str = Field(..., pattern=NAME_PATTERN, description="Unique container name")
    script: str = Field(..., description="Absolute path to the entry-point script")
    runtime_version: str = Field(
        ..., description="Runtime tag derived once at creation and stored verbatim"
    )
    status: ContainerStatus = Field(default=ContainerStatus.STOPPED)
    port_mapping: Optional[str] = Field(
        default=None,
        description="host:container mapping from the last start; left stale on stop",
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_running(self) -> bool:
        return self.status == ContainerStatus.RUNNING


class StatusReport(BaseModel):
    """Persisted status compared against live tagged processes."""

    name: str
    persisted_status: ContainerStatus
    live_pids: List[int] = Field(default_factory=list)
    verified: bool = Field(
        default=False, description="Whether the process table was queried"
    )

    @property
    def consistent(self) -> bool:
        """True when the persisted status agrees with the live processes.

        Always True for unverified reports.
        """
        if not self.verified:
            return True
        if self.persisted_status == ContainerStatus.RUNNING:
            return bool(self.live_pids)
        return not self.live_pids


def validate_container_name(name: str) -> str:
    """Validate a container name before it is mapped onto paths."""
    if not name:
        raise InvalidNameError(name, "name must not be empty")
    if len(name) > 64:
        raise InvalidNameError(name, "name must be at most 64 characters")
    if not _NAME_RE.match(name):
        raise InvalidNameError(
            name,
            "use letters, digits, '.', '_' or '-', starting with a letter or digit",
        )
    return name
