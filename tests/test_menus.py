"""
Tests for popup menus and the key binding table.
"""

from palette.panels.keys import (
    ARROW_RIGHT,
    BACKSPACE,
    ENTER,
    KeyDispatcher,
    KeyEvent,
    ModeScope,
    mode_scope,
)
from palette.panels.menus import MenuKind, build_action_menu, build_sort_menu
from palette.search.models import LaunchAction
from palette.search.organizer import GroupMode, SortMode
from palette.search.parser import Mode


class TestActionMenu:
    """Test the contextual launch menu."""

    def test_entries(self):
        menu = build_action_menu(has_selection=True, on_action=lambda a: None)
        assert menu.kind == MenuKind.ACTION
        assert [e.label for e in menu.entries] == ["Open", "Open in workspace", "Pin", "Replace"]
        assert not any(e.disabled for e in menu.entries)

    def test_replace_disabled_without_selection(self):
        menu = build_action_menu(has_selection=False, on_action=lambda a: None)
        assert menu.entries[3].disabled is True
        assert menu.index == 0

    def test_execute_passes_action(self):
        chosen = []
        menu = build_action_menu(has_selection=True, on_action=chosen.append)
        menu.move(1)
        assert menu.execute() is True
        assert chosen == [LaunchAction.WORKSPACE]

    def test_disabled_entry_focusable_but_not_selectable(self):
        chosen = []
        menu = build_action_menu(has_selection=False, on_action=chosen.append)
        menu.move(-1)
        assert menu.focused.id == "replace"
        assert menu.execute() is False
        assert chosen == []

    def test_focus_wraps(self):
        menu = build_action_menu(has_selection=True, on_action=lambda a: None)
        menu.move(-1)
        assert menu.index == 3
        menu.move(1)
        assert menu.index == 0


class TestSortMenu:
    """Test the sort/group settings menu."""

    def test_sections_and_checkmarks(self):
        menu = build_sort_menu(SortMode.PLUGIN, GroupMode.TYPE, lambda m: None, lambda m: None)
        assert [e.section for e in menu.entries] == ["Sort"] * 3 + ["Group"] * 3
        selected = [e.id for e in menu.entries if e.selected]
        assert selected == ["sort:plugin", "group:type"]
        assert menu.index == 2

    def test_select_group(self):
        picked = []
        menu = build_sort_menu(SortMode.RELEVANCE, GroupMode.NONE, lambda m: None, picked.append)
        menu.index = 4
        menu.execute()
        assert picked == [GroupMode.PLUGIN]


class TestKeyDispatcher:
    """Test the (key, menu_open, mode) binding table."""

    def test_mode_scopes(self):
        assert mode_scope(Mode.PROFILE) == ModeScope.PICKER
        assert mode_scope(Mode.GLOBAL) == ModeScope.SEARCH
        assert mode_scope(Mode.IDLE) == ModeScope.IDLE

    def test_unbound_key_passes_through(self):
        keys = KeyDispatcher()
        assert keys.dispatch(KeyEvent("a"), False, Mode.GLOBAL) is False

    def test_binding_respects_menu_and_mode(self):
        calls = []
        keys = KeyDispatcher()
        keys.bind(ARROW_RIGHT, False, ModeScope.SEARCH, lambda e: calls.append("open"))
        assert keys.dispatch(KeyEvent(ARROW_RIGHT), False, Mode.QUERY) is True
        assert keys.dispatch(KeyEvent(ARROW_RIGHT), True, Mode.QUERY) is False
        assert keys.dispatch(KeyEvent(ARROW_RIGHT), False, Mode.SCOPE) is False
        assert calls == ["open"]

    def test_handler_returning_false_is_not_consumed(self):
        keys = KeyDispatcher()
        keys.bind(BACKSPACE, False, tuple(ModeScope), lambda e: False)
        keys.bind(ENTER, False, tuple(ModeScope), lambda e: None)
        assert keys.dispatch(KeyEvent(BACKSPACE), False, Mode.PROFILE) is False
        assert keys.dispatch(KeyEvent(ENTER), False, Mode.PROFILE) is True
