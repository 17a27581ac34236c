"""
Search package - Input parsing, option routing, scheduling and ordering.

Keystrokes flow through the grammar and mode parser; picker modes are
routed to option handlers, search modes to the debounced scheduler, and
fetched results through the organizer.
"""

from .parser import Mode, ModeParser, ParsedState
from .router import OptionItem, OptionRouter, OptionHandler

__all__ = ["Mode", "ModeParser", "ParsedState", "OptionItem", "OptionRouter", "OptionHandler"]
