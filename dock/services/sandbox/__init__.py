"""Sandbox services using proot.

This package provides proot-based workload management:
- proot.py: ProcessHandle dataclass and ProotConfig builder
- manager.py: Container root directories and log files
- launcher.py: Detached workload launch with log capture
- locator.py: Tag-based process lookup and termination
"""

from .manager import RootManager
from .launcher import SandboxLauncher
from .locator import ProcessLocator
from .proot import ProcessHandle, ProotConfig

__all__ = [
    "RootManager",
    "SandboxLauncher",
    "ProcessLocator",
    "ProcessHandle",
    "ProotConfig",
]
