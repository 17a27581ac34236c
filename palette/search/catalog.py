"""
Scope Catalog - Profile and plugin-scope vocabulary.

Derived from the scope list returned by the search backend:
  - Profiles are the union of all instance ids across scopes
  - A scope belongs to a profile if one of its instances has that id
"""

from dataclasses import dataclass
from typing import Optional

from palette.search.models import SearchableScope

DEFAULT_PROFILE_ID = "default"


@dataclass(frozen=True)
class Profile:
    id: str
    label: str


class ScopeCatalog:
    """Lookup helpers over the most recently fetched scope list."""

    def __init__(self, scopes: Optional[list[SearchableScope]] = None):
        self._scopes: list[SearchableScope] = list(scopes or [])

    @property
    def scopes(self) -> list[SearchableScope]:
        return list(self._scopes)

    def replace(self, scopes: list[SearchableScope]) -> None:
        """Swap in a freshly fetched scope list."""
        self._scopes = list(scopes)

    def clear(self) -> None:
        self._scopes = []

    def profiles(self) -> list[Profile]:
        """
        Distinct profiles across all scopes.

        Ids are trimmed and blank ids dropped. The first non-empty label seen
        wins. "default" sorts first, everything else by id.
        """
        labels: dict[str, str] = {}
        for scope in self._scopes:
            for instance in scope.instances:
                profile_id = instance.id.strip()
                if not profile_id or profile_id in labels:
                    continue
                labels[profile_id] = instance.label or profile_id

        profiles = [Profile(id=pid, label=label) for pid, label in labels.items()]
        profiles.sort(key=lambda p: (p.id != DEFAULT_PROFILE_ID, p.id))
        return profiles

    def find_profile(self, token: str) -> Optional[Profile]:
        """Exact, case-insensitive profile id lookup."""
        wanted = token.strip().lower()
        if not wanted:
            return None
        for profile in self.profiles():
            if profile.id.lower() == wanted:
                return profile
        return None

    def scopes_for_profile(self, profile_id: Optional[str]) -> list[SearchableScope]:
        """Scopes with an instance for the profile (all scopes if None)."""
        if not profile_id:
            return list(self._scopes)
        return [scope for scope in self._scopes if scope.has_instance(profile_id)]

    def find_scope(self, profile_id: str, token: str) -> Optional[SearchableScope]:
        """Exact, case-insensitive plugin id lookup within a profile."""
        wanted = token.strip().lower()
        if not wanted:
            return None
        for scope in self.scopes_for_profile(profile_id):
            if scope.plugin_id.lower() == wanted:
                return scope
        return None
