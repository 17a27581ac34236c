"""
Scope Options Handler - Plugin picker after a confirmed profile.

Offers "All" first (skips the scope step), then every scope that has an
instance for the active profile and whose plugin id or label contains the
typed fragment.
"""

from palette.search.catalog import ScopeCatalog
from palette.search.parser import ParsedState, ScopeState
from palette.search.router import ALL_OPTION_ID, OptionItem


class ScopeOptionsHandler:
    """Filter the active profile's scopes by the partial scope token."""

    name = "scopes"
    priority = 300

    def __init__(self, catalog: ScopeCatalog):
        self.catalog = catalog

    def matches(self, state: ParsedState) -> bool:
        return isinstance(state, ScopeState)

    def get_options(self, state: ParsedState) -> list[OptionItem]:
        q = state.scope_query.strip().lower()
        profile_id = state.profile_id
        options = [OptionItem(
            id=ALL_OPTION_ID,
            label="All",
            description="All plugins",
            kind="scope",
            profile_id=profile_id,
        )]

        for scope in self.catalog.scopes_for_profile(profile_id):
            if q and q not in scope.plugin_id.lower() and q not in scope.label.lower():
                continue
            options.append(OptionItem(
                id=scope.plugin_id,
                label=scope.label.strip() or scope.plugin_id,
                kind="scope",
                profile_id=profile_id,
            ))

        return options
