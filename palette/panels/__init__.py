# Palette Panels Package
"""
Interaction layer of the palette.

The engine owns parsing, search scheduling, focus and menus; the host only
feeds it input text and key events and draws the views it renders.
"""

from .keys import KeyEvent
from .menus import Menu, MenuEntry, MenuKind
from .palette import CommandPalette, PaletteView

__all__ = ["CommandPalette", "PaletteView", "KeyEvent", "Menu", "MenuEntry", "MenuKind"]
