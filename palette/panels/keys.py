"""
Key Dispatch - Explicit binding table for palette keyboard handling.

Bindings are keyed by (key, menu_open, mode_scope). A handler returns
False to let the key pass through to normal text editing; anything else
means the key was consumed and must not propagate to the host.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from palette.search.parser import Mode, PICKER_MODES, SEARCH_MODES

ESCAPE = "Escape"
ARROW_UP = "ArrowUp"
ARROW_DOWN = "ArrowDown"
ARROW_RIGHT = "ArrowRight"
ENTER = "Enter"
BACKSPACE = "Backspace"


@dataclass(frozen=True)
class KeyEvent:
    """A key press as seen by the palette."""
    key: str
    shift: bool = False
    caret_at_end: bool = True  # selection collapsed at the end of the input


class ModeScope(str, Enum):
    PICKER = "picker"  # command, profile, scope
    SEARCH = "search"  # query, global
    IDLE = "idle"


ALL_SCOPES = tuple(ModeScope)


def mode_scope(mode: Mode) -> ModeScope:
    if mode in PICKER_MODES:
        return ModeScope.PICKER
    if mode in SEARCH_MODES:
        return ModeScope.SEARCH
    return ModeScope.IDLE


KeyHandler = Callable[[KeyEvent], Optional[bool]]


class KeyDispatcher:
    """Routes key events through the binding table."""

    def __init__(self):
        self._bindings: dict[tuple[str, bool, ModeScope], KeyHandler] = {}

    def bind(
        self,
        key: str,
        menu_open: bool,
        scopes: Union[ModeScope, Iterable[ModeScope]],
        handler: KeyHandler,
    ) -> None:
        """Register a handler for a key in one or more mode scopes."""
        if isinstance(scopes, ModeScope):
            scopes = (scopes,)
        for scope in scopes:
            self._bindings[(key, menu_open, scope)] = handler

    def lookup(self, key: str, menu_open: bool, scope: ModeScope) -> Optional[KeyHandler]:
        return self._bindings.get((key, menu_open, scope))

    def dispatch(self, event: KeyEvent, menu_open: bool, mode: Mode) -> bool:
        """
        Run the bound handler for the event.

        Returns:
            True if the key was consumed (stop propagation)
        """
        handler = self.lookup(event.key, menu_open, mode_scope(mode))
        if handler is None:
            return False
        return handler(event) is not False
