"""CLI module for Clive."""

from .types import DisplayMode, RefreshInterval

__all__ = [
    "DisplayMode",
    "RefreshInterval",
]
