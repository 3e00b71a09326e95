"""Data models for dock."""

from .container import (
    ContainerConfig,
    ContainerStatus,
    StatusReport,
    validate_container_name,
)
from .errors import (
    ErrorType,
    ErrorDetail,
    ErrorResponse,
    DockException,
    NotFoundError,
    AlreadyExistsError,
    AlreadyRunningError,
    AlreadyStoppedError,
    CannotRemoveRunningError,
    ScriptNotFoundError,
    InvalidNameError,
    DetectionError,
    LaunchError,
    StorageError,
)

__all__ = [
    # Container models
    "ContainerConfig",
    "ContainerStatus",
    "StatusReport",
    "validate_container_name",
    # Error models
    "ErrorType",
    "ErrorDetail",
    "ErrorResponse",
    "DockException",
    "NotFoundError",
    "AlreadyExistsError",
    "AlreadyRunningError",
    "AlreadyStoppedError",
    "CannotRemoveRunningError",
    "ScriptNotFoundError",
    "InvalidNameError",
    "DetectionError",
    "LaunchError",
    "StorageError",
]
