"""Utility modules for dock."""

from .logging import setup_logging

__all__ = [
    "setup_logging",
]
