# Palette Engine Package
"""
Command palette query engine.

Layers:
  - Search: input grammar, mode parser, search scheduling, result ordering
  - Services: preference storage and the HTTP search API client
  - Panels: the palette engine, popup menus and keyboard dispatch
"""

__version__ = "0.1.0-dev"
