"""dock - lightweight sandboxed container manager."""

__version__ = "0.2.0"
