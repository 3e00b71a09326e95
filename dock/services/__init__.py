"""Service layer for dock."""

from .container import ContainerManager
from .storage import ConfigStore

__all__ = [
    "ContainerManager",
    "ConfigStore",
]
