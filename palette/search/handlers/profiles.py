"""
Profile Options Handler - Profile picker after a confirmed /search.

Always offers "All" first (skips the profile step), then every known
profile whose id or label contains the typed fragment.
"""

from palette.search.catalog import ScopeCatalog
from palette.search.parser import ParsedState, ProfileState
from palette.search.router import ALL_OPTION_ID, OptionItem


class ProfileOptionsHandler:
    """Filter catalog profiles by the partial profile token."""

    name = "profiles"
    priority = 200

    def __init__(self, catalog: ScopeCatalog):
        self.catalog = catalog

    def matches(self, state: ParsedState) -> bool:
        return isinstance(state, ProfileState)

    def get_options(self, state: ParsedState) -> list[OptionItem]:
        q = state.profile_query.strip().lower()
        options = [OptionItem(
            id=ALL_OPTION_ID,
            label="All",
            description="All profiles",
            kind="profile",
        )]

        for profile in self.catalog.profiles():
            if q and q not in profile.id.lower() and q not in profile.label.lower():
                continue
            options.append(OptionItem(
                id=profile.id,
                label=profile.label.strip() or profile.id,
                kind="profile",
            ))

        return options
