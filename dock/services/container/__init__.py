"""Container lifecycle services.

- manager.py: ContainerManager, the lifecycle engine behind the dock CLI
"""

from .manager import ContainerManager

__all__ = [
    "ContainerManager",
]
