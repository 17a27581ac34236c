"""
Option handlers - Suggestion builders for the picker modes.

Each handler checks if it serves the current parsed state and returns
typed options.
"""

from .commands import CommandOptionsHandler
from .profiles import ProfileOptionsHandler
from .scopes import ScopeOptionsHandler

__all__ = [
    "CommandOptionsHandler",
    "ProfileOptionsHandler",
    "ScopeOptionsHandler",
]
