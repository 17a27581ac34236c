# Palette Services Package
"""
Backend services for the palette engine.

Services handle persistence and the search backend connection.
"""

from .preferences import PreferencesService, get_preferences_service
from .search_api import SearchApiClient, SearchApiError

__all__ = ["PreferencesService", "get_preferences_service", "SearchApiClient", "SearchApiError"]
