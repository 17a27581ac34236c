"""
Popup Menus - Contextual action menu and sort/group settings menu.

Menus are transient: fully rebuilt on open, discarded on close, and own
their own focus index. Disabled entries can be focused but not selected.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from palette.search.models import LaunchAction
from palette.search.organizer import GroupMode, SortMode
from palette.utils.helpers import wrap_index


class MenuKind(str, Enum):
    ACTION = "action"
    SORT = "sort"


@dataclass
class MenuEntry:
    id: str
    label: str
    on_select: Callable[[], None]
    disabled: bool = False
    selected: bool = False
    section: Optional[str] = None


@dataclass
class Menu:
    kind: MenuKind
    entries: list[MenuEntry] = field(default_factory=list)
    index: int = 0
    anchor: Optional[int] = None  # result row the action menu belongs to

    @property
    def focused(self) -> Optional[MenuEntry]:
        if 0 <= self.index < len(self.entries):
            return self.entries[self.index]
        return None

    def move(self, delta: int) -> None:
        """Move focus with wraparound over all entries."""
        if not self.entries:
            return
        self.index = wrap_index(self.index + delta, len(self.entries))

    def execute(self) -> bool:
        """Run the focused entry. Returns False if nothing ran."""
        entry = self.focused
        if entry is None or entry.disabled:
            return False
        entry.on_select()
        return True


ACTION_MENU_ITEMS = (
    ("modal", "Open", LaunchAction.MODAL, False),
    ("workspace", "Open in workspace", LaunchAction.WORKSPACE, False),
    ("pin", "Pin", LaunchAction.PIN, False),
    ("replace", "Replace", LaunchAction.REPLACE, True),
)

SORT_MENU_ITEMS = (
    (SortMode.RELEVANCE, "Relevance"),
    (SortMode.ITEMS, "Items first"),
    (SortMode.PLUGIN, "Plugin A-Z"),
)

GROUP_MENU_ITEMS = (
    (GroupMode.NONE, "None"),
    (GroupMode.PLUGIN, "By plugin"),
    (GroupMode.TYPE, "By result type"),
)


def build_action_menu(
    has_selection: bool,
    on_action: Callable[[LaunchAction], None],
    anchor: Optional[int] = None,
) -> Menu:
    """
    Build the contextual launch menu for a focused result.

    Args:
        has_selection: Whether the host has a selected panel ("Replace" needs one)
        on_action: Called with the chosen LaunchAction
        anchor: Index of the result row the menu is attached to

    Returns:
        Menu focused on its first enabled entry
    """
    entries = [
        MenuEntry(
            id=entry_id,
            label=label,
            disabled=requires_selection and not has_selection,
            on_select=lambda a=action: on_action(a),
        )
        for entry_id, label, action, requires_selection in ACTION_MENU_ITEMS
    ]
    index = next((i for i, entry in enumerate(entries) if not entry.disabled), 0)
    return Menu(kind=MenuKind.ACTION, entries=entries, index=index, anchor=anchor)


def build_sort_menu(
    sort_mode: SortMode,
    group_mode: GroupMode,
    on_sort: Callable[[SortMode], None],
    on_group: Callable[[GroupMode], None],
) -> Menu:
    """Build the sort/group menu with the active choices checked."""
    entries = [
        MenuEntry(
            id=f"sort:{mode.value}",
            label=label,
            section="Sort",
            selected=mode == sort_mode,
            on_select=lambda m=mode: on_sort(m),
        )
        for mode, label in SORT_MENU_ITEMS
    ]
    entries += [
        MenuEntry(
            id=f"group:{mode.value}",
            label=label,
            section="Group",
            selected=mode == group_mode,
            on_select=lambda m=mode: on_group(m),
        )
        for mode, label in GROUP_MENU_ITEMS
    ]
    index = next((i for i, entry in enumerate(entries) if entry.selected), 0)
    return Menu(kind=MenuKind.SORT, entries=entries, index=index)
