"""
Option Router - Dispatches picker modes to priority-ordered option handlers.

Each handler declares a priority (lower = higher priority) and a matches()
method. The router finds the first matching handler and returns the options
it builds for the current parsed state. Search modes have no handler and
produce no options.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from palette.search.parser import ParsedState

ALL_OPTION_ID = "__all__"


@dataclass(frozen=True)
class OptionItem:
    """A selectable suggestion in one of the pickers."""
    id: str
    label: str
    kind: str  # command, profile, scope
    description: str = ""
    profile_id: Optional[str] = None

    @property
    def is_all(self) -> bool:
        return self.id == ALL_OPTION_ID


class OptionHandler(ABC):
    """Base class for all option handlers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Handler identifier."""
        ...

    @property
    @abstractmethod
    def priority(self) -> int:
        """Lower number = checked first."""
        ...

    @abstractmethod
    def matches(self, state: ParsedState) -> bool:
        """Return True if this handler builds options for the state."""
        ...

    @abstractmethod
    def get_options(self, state: ParsedState) -> list[OptionItem]:
        """Return options for the state."""
        ...


class OptionRouter:
    """Routes parsed states to the appropriate option handler."""

    def __init__(self):
        self._handlers: list[OptionHandler] = []

    def register(self, handler: OptionHandler) -> None:
        """Register a handler and re-sort by priority."""
        self._handlers.append(handler)
        self._handlers.sort(key=lambda h: h.priority)

    def route(self, state: ParsedState) -> tuple[str, list[OptionItem]]:
        """
        Find the first matching handler and return its options.

        Args:
            state: The current parsed state

        Returns:
            Tuple of (handler_name, options).
            Returns ("none", []) if no handler matches.
        """
        for handler in self._handlers:
            if handler.matches(state):
                return handler.name, handler.get_options(state)

        return "none", []
