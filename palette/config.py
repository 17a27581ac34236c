"""
Palette Configuration - Entry point that wires the engine together.

Reads settings.toml, builds the HTTP search client and the preference
store, and returns a ready CommandPalette.

Usage:
    palette = create_palette(on_launch=open_result, get_selected_panel_id=workspace.active_id)
    palette.open()
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx
from loguru import logger

from palette.panels.palette import CommandPalette, OnLaunch
from palette.services.preferences import PreferencesService
from palette.services.search_api import SearchApiClient
from palette.utils.helpers import load_settings


def create_palette(
    on_launch: OnLaunch,
    get_selected_panel_id: Callable[[], Optional[str]] = lambda: None,
    settings: Optional[Dict[str, Any]] = None,
    settings_path: Optional[Path] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    **hooks: Any,
) -> CommandPalette:
    """
    Build a CommandPalette from settings.

    Args:
        on_launch: Host callback receiving (result, action)
        get_selected_panel_id: Returns the selected panel id, or None
        settings: Pre-loaded settings (skips reading settings_path)
        settings_path: TOML file to load when settings is not given
        transport: Optional httpx transport for the search client
        **hooks: Extra CommandPalette keyword arguments (resolve_icon,
                 set_status, is_mobile_viewport, on_render)

    Returns:
        CommandPalette wired to the HTTP search API. It owns the client and
        the preference store; await its aclose() on unmount.
    """
    if settings is None:
        settings = load_settings(settings_path)

    api = settings["api"]
    client = SearchApiClient(
        base_url=api["base_url"],
        timeout=float(api["timeout"]),
        transport=transport,
    )

    db_path = settings["preferences"]["db_path"] or None
    preferences = PreferencesService(db_path)

    search = settings["search"]
    limit = int(search["limit"]) or None

    logger.debug(f"Creating palette against {client.base_url}")
    return CommandPalette(
        fetch_scopes=client.fetch_scopes,
        fetch_results=client.fetch_results,
        get_selected_panel_id=get_selected_panel_id,
        on_launch=on_launch,
        preferences=preferences,
        own_preferences=True,
        search_client=client,
        debounce_ms=int(search["debounce_ms"]),
        limit=limit,
        **hooks,
    )
