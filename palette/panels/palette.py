"""
Command Palette - The query engine behind the palette overlay.

Features:
- Incremental parsing of the input into command/profile/scope/query modes
- Picker suggestions for slash commands, profiles and plugin scopes
- Debounced, cancellation-safe search in query and global modes
- Sorting/grouping of results with persisted preferences
- Keyboard navigation with wraparound and two popup menus
- Backspace step-back through confirmed picker segments

The engine does not draw anything. Every render produces a PaletteView
that the host turns into widgets.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from loguru import logger

from palette.panels.keys import (
    ALL_SCOPES,
    ARROW_DOWN,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    ENTER,
    ESCAPE,
    KeyDispatcher,
    KeyEvent,
    ModeScope,
)
from palette.panels.menus import Menu, MenuKind, build_action_menu, build_sort_menu
from palette.search.catalog import ScopeCatalog
from palette.search.handlers import (
    CommandOptionsHandler,
    ProfileOptionsHandler,
    ScopeOptionsHandler,
)
from palette.search.models import LaunchAction, SearchableScope, SearchApiResult
from palette.search.organizer import (
    DEFAULT_GROUP_MODE,
    DEFAULT_SORT_MODE,
    GroupMode,
    HeaderEntry,
    OrganizedResults,
    SortMode,
    organize,
)
from palette.search.parser import (
    IdleState,
    Mode,
    ModeParser,
    ParsedState,
    ProfileState,
    QueryState,
    ScopeState,
    is_picker_mode,
    is_search_mode,
)
from palette.search.router import OptionItem, OptionRouter
from palette.search.scheduler import DEFAULT_DEBOUNCE_MS, FetchResults, SearchScheduler
from palette.services.preferences import PreferencesService, get_preferences_service
from palette.services.search_api import SearchApiClient
from palette.utils.helpers import clamp_index, wrap_index

FetchScopes = Callable[[], Awaitable[list[SearchableScope]]]
OnLaunch = Callable[[SearchApiResult, LaunchAction], Optional[bool]]


@dataclass(frozen=True)
class ResultRow:
    result: SearchApiResult
    index: int
    focused: bool
    meta: str
    icon: Optional[str] = None


@dataclass(frozen=True)
class MenuRow:
    id: str
    label: str
    focused: bool
    disabled: bool = False
    selected: bool = False
    section: Optional[str] = None


@dataclass(frozen=True)
class MenuView:
    kind: MenuKind
    rows: tuple[MenuRow, ...]
    anchor: Optional[int] = None


@dataclass(frozen=True)
class PaletteView:
    """Everything the host needs to draw the palette."""
    mode: Mode
    input: str
    placeholder: str = ""
    options: tuple[OptionItem, ...] = ()
    option_index: int = 0
    entries: tuple[Union[HeaderEntry, ResultRow], ...] = ()
    result_index: int = 0
    message: str = ""
    loading: bool = False
    menu: Optional[MenuView] = None
    sort_visible: bool = False
    sort_active: bool = False


class CommandPalette:
    """
    Palette engine for one mounted palette.

    Construct fresh per mount; nothing here is shared between instances
    except the preference store.
    """

    def __init__(
        self,
        fetch_scopes: FetchScopes,
        fetch_results: FetchResults,
        get_selected_panel_id: Callable[[], Optional[str]],
        on_launch: OnLaunch,
        resolve_icon: Optional[Callable[[SearchApiResult], Optional[str]]] = None,
        set_status: Optional[Callable[[str], None]] = None,
        is_mobile_viewport: Optional[Callable[[], bool]] = None,
        on_render: Optional[Callable[[PaletteView], Any]] = None,
        preferences: Optional[PreferencesService] = None,
        own_preferences: bool = False,
        search_client: Optional[SearchApiClient] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        limit: Optional[int] = None,
    ):
        self.fetch_scopes = fetch_scopes
        self.get_selected_panel_id = get_selected_panel_id
        self.on_launch = on_launch
        self.resolve_icon = resolve_icon
        self.set_status = set_status
        self.is_mobile_viewport = is_mobile_viewport
        self.on_render = on_render
        self.preferences = preferences or get_preferences_service()
        self.own_preferences = own_preferences and preferences is not None
        self.search_client = search_client

        self.catalog = ScopeCatalog()
        self.parser = ModeParser(self.catalog)
        self.router = OptionRouter()
        self.router.register(CommandOptionsHandler())
        self.router.register(ProfileOptionsHandler(self.catalog))
        self.router.register(ScopeOptionsHandler(self.catalog))

        self.scheduler = SearchScheduler(
            fetch_results,
            on_results=self._on_results,
            on_error=self._on_search_error,
            debounce_ms=debounce_ms,
            limit=limit,
        )

        self.is_open = False
        self.input_value = ""
        self.state: ParsedState = IdleState()
        self.profile_skipped = False
        self.scope_skipped = False
        self.options: list[OptionItem] = []
        self.option_index = 0
        self.result_index = 0
        self.menu: Optional[Menu] = None
        self.status = ""
        self.view: Optional[PaletteView] = None

        self.sort_mode: SortMode = DEFAULT_SORT_MODE
        self.group_mode: GroupMode = DEFAULT_GROUP_MODE
        self._organized: Optional[OrganizedResults] = None
        self._organized_for: Optional[tuple] = None
        self._scopes_task: Optional[asyncio.Task] = None

        self.keys = KeyDispatcher()
        self._bind_keys()
        self._load_preferences()

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------

    def open(self) -> None:
        """Reset to a blank palette and start loading the scope catalog."""
        self._load_preferences()
        self._close_menus()
        self.is_open = True
        self.input_value = ""
        self.profile_skipped = False
        self.scope_skipped = False
        self.state = IdleState()
        self.option_index = 0
        self.result_index = 0
        self.scheduler.reset()
        self._invalidate_results()
        self._cancel_scopes_load()
        self._scopes_task = asyncio.get_running_loop().create_task(self.load_scopes())
        self.handle_input()

    def close(self) -> None:
        """Hide the palette and drop every cache, timer and in-flight request."""
        self._close_menus()
        self.is_open = False
        self.scheduler.reset()
        self._invalidate_results()
        self._cancel_scopes_load()
        self.catalog.clear()

    async def aclose(self) -> None:
        """
        Tear down the palette when the host unmounts it.

        Closes the palette, then releases the HTTP client and, if this
        palette owns it, the preference store.
        """
        self.close()
        if self.search_client is not None:
            await self.search_client.aclose()
        if self.own_preferences:
            self.preferences.close()
        logger.debug("Palette disposed")

    def _cancel_scopes_load(self) -> None:
        if self._scopes_task is not None and not self._scopes_task.done():
            self._scopes_task.cancel()
        self._scopes_task = None

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    async def load_scopes(self) -> None:
        """Fetch the scope catalog. Failures leave the catalog empty."""
        try:
            scopes = await self.fetch_scopes()
        except Exception:
            logger.exception("Failed to load search scopes")
            self.catalog.clear()
            self._status("Failed to load search scopes")
            return

        self.catalog.replace(scopes)
        logger.debug(f"Loaded {len(scopes)} search scopes")
        if self.is_open:
            # Re-parse: tokens typed before the catalog arrived may now resolve
            self.handle_input(close_menus=False)

    # ----------------------------------------------------------------
    # Derived state
    # ----------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def results(self) -> list[SearchApiResult]:
        return self.scheduler.results

    @property
    def loading(self) -> bool:
        return self.scheduler.loading

    @property
    def ordered_results(self) -> list[SearchApiResult]:
        return self._organized_results().ordered

    def focused_result(self) -> Optional[SearchApiResult]:
        ordered = self.ordered_results
        if 0 <= self.result_index < len(ordered):
            return ordered[self.result_index]
        return None

    def _organized_results(self) -> OrganizedResults:
        key = (self.sort_mode, self.group_mode)
        cached = self._organized_for
        if self._organized is None or cached is None or cached[0] is not self.results or cached[1] != key:
            self._organized = organize(self.results, self.sort_mode, self.group_mode)
            self._organized_for = (self.results, key)
        return self._organized

    def _invalidate_results(self) -> None:
        self._organized = None
        self._organized_for = None

    # ----------------------------------------------------------------
    # Input handling
    # ----------------------------------------------------------------

    def set_input(self, value: str) -> None:
        """Replace the input text (as if the user typed it) and re-parse."""
        self.input_value = value
        self.handle_input()

    def handle_input(self, close_menus: bool = True) -> None:
        """Re-derive the parsed state from the current input."""
        if not self.is_open:
            return
        if close_menus:
            self._close_menus()

        value = self.input_value
        if not value.startswith("/search"):
            self.profile_skipped = False
            self.scope_skipped = False

        state = self.parser.parse(
            value,
            profile_skipped=self.profile_skipped,
            scope_skipped=self.scope_skipped,
        )
        previous = self.state.mode
        self.state = state

        if previous != state.mode:
            if is_picker_mode(state):
                self.option_index = 0
            if is_search_mode(state):
                self.result_index = 0
        if isinstance(state, ProfileState) and not state.profile_query.strip():
            self.option_index = 0
        if isinstance(state, ScopeState) and not state.scope_query.strip():
            self.option_index = 0

        self.scheduler.schedule(state)
        self.render()

    def _on_results(self, results: list[SearchApiResult]) -> None:
        self._invalidate_results()
        self.result_index = 0
        self.render()

    def _on_search_error(self, exc: Exception) -> None:
        self._invalidate_results()
        self._status("Search failed")
        self.render()

    def _status(self, message: str) -> None:
        self.status = message
        if self.set_status:
            self.set_status(message)

    # ----------------------------------------------------------------
    # Rendering
    # ----------------------------------------------------------------

    def placeholder(self) -> str:
        """Hint shown after the input while the current segment is empty."""
        state = self.state
        if isinstance(state, ProfileState) and not state.profile_query.strip():
            return "<profile>"
        if isinstance(state, ScopeState) and not state.scope_query.strip():
            return "<plugin>"
        if isinstance(state, QueryState) and not state.query.strip():
            return "<query>"
        return ""

    def render(self) -> Optional[PaletteView]:
        """Build the view model, clamping focus indices to the visible lists."""
        if not self.is_open:
            return None

        entries: list[Union[HeaderEntry, ResultRow]] = []
        message = ""
        search_mode = is_search_mode(self.state)

        if is_picker_mode(self.state):
            _, self.options = self.router.route(self.state)
            self.option_index = clamp_index(self.option_index, len(self.options))
            if not self.options:
                message = "No matches"
        else:
            self.options = []
            organized = self._organized_results()
            self.result_index = clamp_index(self.result_index, len(organized))
            query = self.state.query.strip() if search_mode else ""

            if self.loading and query:
                message = "Searching..."
            elif not organized.ordered and query:
                message = "No results"
            else:
                for entry in organized.entries:
                    if isinstance(entry, HeaderEntry):
                        entries.append(entry)
                        continue
                    result = entry.result
                    entries.append(ResultRow(
                        result=result,
                        index=entry.index,
                        focused=entry.index == self.result_index,
                        meta=f"{result.plugin_id}:{result.instance_id}",
                        icon=self.resolve_icon(result) if self.resolve_icon else None,
                    ))

        view = PaletteView(
            mode=self.mode,
            input=self.input_value,
            placeholder=self.placeholder(),
            options=tuple(self.options),
            option_index=self.option_index,
            entries=tuple(entries),
            result_index=self.result_index,
            message=message,
            loading=self.loading,
            menu=self._menu_view(),
            sort_visible=search_mode,
            sort_active=(
                self.sort_mode != DEFAULT_SORT_MODE or self.group_mode != DEFAULT_GROUP_MODE
            ),
        )
        self.view = view
        if self.on_render:
            self.on_render(view)
        return view

    def _menu_view(self) -> Optional[MenuView]:
        if self.menu is None:
            return None
        rows = tuple(
            MenuRow(
                id=entry.id,
                label=entry.label,
                focused=index == self.menu.index,
                disabled=entry.disabled,
                selected=entry.selected,
                section=entry.section,
            )
            for index, entry in enumerate(self.menu.entries)
        )
        return MenuView(kind=self.menu.kind, rows=rows, anchor=self.menu.anchor)

    # ----------------------------------------------------------------
    # Keyboard
    # ----------------------------------------------------------------

    def _bind_keys(self) -> None:
        keys = self.keys

        keys.bind(ESCAPE, True, ALL_SCOPES, lambda e: self._dismiss_menu())
        keys.bind(ESCAPE, False, ALL_SCOPES, lambda e: self.close())

        keys.bind(ARROW_DOWN, True, ALL_SCOPES, lambda e: self._move_menu_focus(1))
        keys.bind(ARROW_UP, True, ALL_SCOPES, lambda e: self._move_menu_focus(-1))
        keys.bind(ARROW_DOWN, False, ALL_SCOPES, lambda e: self.move_focus(1))
        keys.bind(ARROW_UP, False, ALL_SCOPES, lambda e: self.move_focus(-1))

        # Swallowed while a menu is open
        keys.bind(ARROW_RIGHT, True, ALL_SCOPES, lambda e: None)
        keys.bind(ARROW_RIGHT, False, ModeScope.SEARCH, lambda e: self.open_action_menu())

        keys.bind(ENTER, True, ALL_SCOPES, lambda e: self._execute_menu())
        keys.bind(ENTER, False, ModeScope.PICKER, lambda e: self.select_option())
        keys.bind(ENTER, False, ModeScope.SEARCH, lambda e: self.launch_focused(e.shift))
        keys.bind(ENTER, False, ModeScope.IDLE, lambda e: None)

        keys.bind(BACKSPACE, True, ALL_SCOPES, self.handle_backspace)
        keys.bind(BACKSPACE, False, ALL_SCOPES, self.handle_backspace)

    def handle_key(self, event: KeyEvent) -> bool:
        """
        Handle a global key press while the palette is open.

        Args:
            event: The key event

        Returns:
            True if the key was consumed and must not reach the host
        """
        if not self.is_open:
            return False
        return self.keys.dispatch(event, self.menu is not None, self.mode)

    def move_focus(self, delta: int) -> None:
        """Move the option or result focus with wraparound."""
        if is_picker_mode(self.state):
            if not self.options:
                self.option_index = 0
                return
            self.option_index = wrap_index(self.option_index + delta, len(self.options))
            self.render()
            return

        count = len(self._organized_results())
        if count == 0:
            self.result_index = 0
            return
        self.result_index = wrap_index(self.result_index + delta, count)
        self.render()

    def handle_backspace(self, event: KeyEvent) -> bool:
        """
        Step back one picker segment at a boundary.

        Only applies with the caret at the end of the input and an empty
        trailing segment. Returns True if the input was rewritten.
        """
        if not event.caret_at_end:
            return False

        state = self.state
        if isinstance(state, QueryState) and not state.query.strip():
            if self.scope_skipped or state.scope_id:
                self.scope_skipped = False
                self.set_input(f"/search {state.profile_id} " if state.profile_id else "/search ")
                return True
            if self.profile_skipped:
                self.profile_skipped = False
                self.set_input("/search ")
                return True

        if isinstance(state, ScopeState) and not state.scope_query.strip():
            self.scope_skipped = False
            self.profile_skipped = False
            self.set_input("/search ")
            return True

        if isinstance(state, ProfileState) and not state.profile_query.strip():
            self.profile_skipped = False
            self.set_input("/")
            return True

        return False

    # ----------------------------------------------------------------
    # Options
    # ----------------------------------------------------------------

    def select_option(self) -> None:
        """Confirm the focused picker option, rewriting the input."""
        if not (0 <= self.option_index < len(self.options)):
            return
        option = self.options[self.option_index]

        if option.kind == "command":
            self.profile_skipped = False
            self.scope_skipped = False
            self.set_input("/pinned" if option.id == "pinned" else "/search ")
            return

        if option.kind == "profile":
            if option.is_all:
                self.profile_skipped = True
                self.scope_skipped = False
                self.set_input("/search ")
                return
            self.profile_skipped = False
            self.scope_skipped = False
            self.set_input(f"/search {option.id} ")
            return

        if option.kind == "scope":
            profile_id = option.profile_id
            if not profile_id and isinstance(self.state, ScopeState):
                profile_id = self.state.profile_id
            if not profile_id:
                return
            if option.is_all:
                self.scope_skipped = True
                self.set_input(f"/search {profile_id} ")
                return
            self.scope_skipped = False
            self.set_input(f"/search {profile_id} {option.id} ")

    def click_option(self, index: int) -> None:
        self.option_index = index
        self.select_option()

    # ----------------------------------------------------------------
    # Launching
    # ----------------------------------------------------------------

    def launch_focused(self, force_replace: bool = False) -> None:
        """
        Launch the focused result.

        Shift+Enter asks to replace the selected panel; without a selected
        panel that is a no-op.
        """
        result = self.focused_result()
        if result is None:
            return
        if force_replace and not self.get_selected_panel_id():
            return
        action = LaunchAction.REPLACE if force_replace else LaunchAction.MODAL
        self._launch(result, action)

    def execute_action(self, action: LaunchAction) -> None:
        """Run an action-menu entry against the focused result."""
        result = self.focused_result()
        if result is None:
            return
        if action == LaunchAction.REPLACE and not self.get_selected_panel_id():
            return
        self._launch(result, action)

    def _launch(self, result: SearchApiResult, action: LaunchAction) -> None:
        try:
            launched = self.on_launch(result, action)
        except Exception:
            logger.exception(f"Launch of {result.plugin_id}:{result.id} failed")
            self._status("Launch failed")
            return
        if launched is not False:
            self.close()

    def click_result(self, index: int) -> None:
        """Pointer click: launch, or open the action menu on mobile."""
        self.result_index = index
        if self.is_mobile_viewport and self.is_mobile_viewport():
            self._close_menus()
            self.render()
            self.open_action_menu()
            return
        self.launch_focused(False)

    def double_click_result(self, index: int) -> None:
        self.result_index = index
        self.launch_focused(False)

    # ----------------------------------------------------------------
    # Menus
    # ----------------------------------------------------------------

    def open_action_menu(self) -> None:
        """Open the launch-action menu for the focused result row."""
        if self.menu is not None or not is_search_mode(self.state):
            return
        if self.focused_result() is None:
            return
        self.menu = build_action_menu(
            has_selection=bool(self.get_selected_panel_id()),
            on_action=self.execute_action,
            anchor=self.result_index,
        )
        self.render()

    def toggle_sort_menu(self) -> None:
        """Open or close the sort/group menu (search modes only)."""
        if not is_search_mode(self.state):
            return
        if self.menu is not None and self.menu.kind == MenuKind.SORT:
            self._dismiss_menu()
            return
        self._close_menus()
        self.menu = build_sort_menu(
            self.sort_mode,
            self.group_mode,
            on_sort=self.set_sort_mode,
            on_group=self.set_group_mode,
        )
        self.render()

    def set_sort_mode(self, mode: SortMode) -> None:
        self.sort_mode = SortMode(mode)
        self._persist_preferences()
        self._close_menus()
        self.render()

    def set_group_mode(self, mode: GroupMode) -> None:
        self.group_mode = GroupMode(mode)
        self._persist_preferences()
        self._close_menus()
        self.render()

    def _move_menu_focus(self, delta: int) -> None:
        if self.menu is None:
            return
        self.menu.move(delta)
        self.render()

    def _execute_menu(self) -> None:
        if self.menu is not None:
            self.menu.execute()

    def _dismiss_menu(self) -> None:
        self._close_menus()
        self.render()

    def _close_menus(self) -> None:
        self.menu = None

    # ----------------------------------------------------------------
    # Preferences
    # ----------------------------------------------------------------

    def _load_preferences(self) -> None:
        self.sort_mode, self.group_mode = self.preferences.load_modes()
        self._invalidate_results()

    def _persist_preferences(self) -> None:
        self.preferences.save_modes(self.sort_mode, self.group_mode)
