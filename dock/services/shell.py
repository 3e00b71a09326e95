"""Interactive shell resolution for `dock enter`."""

import shutil
from typing import Optional, Sequence

from ..models import LaunchError

PREFERRED_SHELLS = ("bash", "sh")


def resolve_shell(candidates: Sequence[str] = PREFERRED_SHELLS) -> str:
    """Return the path of the first available shell, richest first."""
    for candidate in candidates:
        path: Optional[str] = shutil.which(candidate)
        if path:
            return path
    raise LaunchError(f"No interactive shell found (tried: {', '.join(candidates)})")
