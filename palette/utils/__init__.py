# Palette Utilities Package
"""
Shared utility functions and helpers for the palette engine.
"""

from .helpers import clamp_index, load_settings, wrap_index

__all__ = ["clamp_index", "load_settings", "wrap_index"]
