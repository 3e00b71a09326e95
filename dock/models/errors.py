"""Error models and exception classes for dock."""

import time
from typing import Optional, List
from pydantic import BaseModel, Field
from enum import Enum


class ErrorType(str, Enum):
    """Error type enumeration."""

    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    RESOURCE_CONFLICT = "resource_conflict"
    INVALID_STATE = "invalid_state"
    LAUNCH_FAILED = "launch_failed"
    STORAGE = "storage"
    INTERNAL = "internal"


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: Optional[str] = Field(None, description="Field name for validation errors")
    message: str = Field(..., description="Human-readable error message")
    code: Optional[str] = Field(None, description="Machine-readable error code")


class ErrorResponse(BaseModel):
    """Standardized error payload printed by the CLI in --json mode."""

    error: str = Field(..., description="Main error message")
    error_type: ErrorType = Field(..., description="Error category")
    container: Optional[str] = Field(None, description="Container the error concerns")
    details: Optional[List[ErrorDetail]] = Field(
        None, description="Additional error details"
    )
    timestamp: float = Field(default_factory=time.time, description="Error timestamp")

    class Config:
        use_enum_values = True


# Custom Exception Classes


class DockException(Exception):
    """Base exception for dock operations."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.INTERNAL,
        exit_code: int = 1,
        container: Optional[str] = None,
        details: Optional[List[ErrorDetail]] = None,
    ):
        self.message = message
        self.error_type = error_type
        self.exit_code = exit_code
        self.container = container
        self.details = details or []
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            error=self.message,
            error_type=self.error_type,
            container=self.container,
            details=self.details if self.details else None,
        )


class NotFoundError(DockException):
    """No container record exists for the name."""

    def __init__(self, name: str, **kwargs):
        super().__init__(
            message=f"Container '{name}' not found",
            error_type=ErrorType.RESOURCE_NOT_FOUND,
            exit_code=2,
            container=name,
            **kwargs,
        )


class AlreadyExistsError(DockException):
    """A container record already exists for the name."""

    def __init__(self, name: str, **kwargs):
        super().__init__(
            message=f"Container '{name}' already exists",
            error_type=ErrorType.RESOURCE_CONFLICT,
            exit_code=3,
            container=name,
            **kwargs,
        )


class AlreadyRunningError(DockException):
    def __init__(self, name: str, **kwargs):
        super().__init__(
            message=f"Container '{name}' is already running",
            error_type=ErrorType.INVALID_STATE,
            exit_code=4,
            container=name,
            **kwargs,
        )


class AlreadyStoppedError(DockException):
    def __init__(self, name: str, **kwargs):
        super().__init__(
            message=f"Container '{name}' is already stopped",
            error_type=ErrorType.INVALID_STATE,
            exit_code=4,
            container=name,
            **kwargs,
        )


class CannotRemoveRunningError(DockException):
    def __init__(self, name: str, **kwargs):
        super().__init__(
            message=f"Cannot remove running container '{name}'. Stop it first.",
            error_type=ErrorType.INVALID_STATE,
            exit_code=4,
            container=name,
            **kwargs,
        )


class ScriptNotFoundError(DockException):
    """The container's entry-point script does not exist."""

    def __init__(self, script: str, container: Optional[str] = None, **kwargs):
        message = f"Script '{script}' not found"
        if container:
            message += ". Container may be corrupted."
        super().__init__(
            message=message,
            error_type=ErrorType.VALIDATION,
            exit_code=5,
            container=container,
            details=[ErrorDetail(field="script", message=message, code="script_missing")],
            **kwargs,
        )


class InvalidNameError(DockException):
    """The container name cannot be mapped safely onto paths."""

    def __init__(self, name: str, reason: str, **kwargs):
        super().__init__(
            message=f"Invalid container name '{name}': {reason}",
            error_type=ErrorType.VALIDATION,
            exit_code=5,
            details=[ErrorDetail(field="name", message=reason, code="invalid_name")],
            **kwargs,
        )


class DetectionError(DockException):
    """The script's runtime version could not be classified."""

    def __init__(self, script: str, reason: str, **kwargs):
        super().__init__(
            message=f"Could not detect runtime for '{script}': {reason}",
            error_type=ErrorType.VALIDATION,
            exit_code=5,
            **kwargs,
        )


class LaunchError(DockException):
    """The sandbox tool (or a shell) could not be spawned."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_type=ErrorType.LAUNCH_FAILED,
            exit_code=6,
            **kwargs,
        )


class StorageError(DockException):
    """Reading or writing persisted state failed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_type=ErrorType.STORAGE,
            exit_code=7,
            **kwargs,
        )
