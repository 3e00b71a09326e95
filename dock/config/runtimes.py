"""
Runtime configuration for sandboxed workloads.

Every runtime tag the detector can produce has exactly one entry in
RUNTIMES. Tags read back from disk that are no longer known resolve to
the Unknown entry instead of failing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union


class RuntimeTag(str, Enum):
    """Runtime class of a container script, as stored on disk."""

    PYTHON2 = "Python2"
    PYTHON3 = "Python3"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class RuntimeConfig:
    """Configuration for one runtime tag."""

    tag: RuntimeTag
    name: str  # Display name
    executable: str  # Command run inside the sandbox


RUNTIMES: Dict[RuntimeTag, RuntimeConfig] = {
    RuntimeTag.PYTHON2: RuntimeConfig(
        tag=RuntimeTag.PYTHON2,
        name="Python 2",
        executable="python2",
    ),
    RuntimeTag.PYTHON3: RuntimeConfig(
        tag=RuntimeTag.PYTHON3,
        name="Python 3",
        executable="python3",
    ),
    RuntimeTag.UNKNOWN: RuntimeConfig(
        tag=RuntimeTag.UNKNOWN,
        name="Python (unclassified)",
        executable="python",
    ),
}


def parse_runtime_tag(value: Union[str, RuntimeTag]) -> RuntimeTag:
    """Map a stored tag string to a RuntimeTag, defaulting to UNKNOWN."""
    if isinstance(value, RuntimeTag):
        return value
    try:
        return RuntimeTag(value)
    except ValueError:
        return RuntimeTag.UNKNOWN


def get_runtime(tag: Union[str, RuntimeTag]) -> RuntimeConfig:
    """Get the runtime configuration for a tag."""
    return RUNTIMES[parse_runtime_tag(tag)]


def get_runtime_executable(tag: Union[str, RuntimeTag]) -> str:
    """Get the executable that runs scripts of the given runtime tag."""
    return get_runtime(tag).executable
