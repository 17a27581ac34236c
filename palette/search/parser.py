"""
Mode Parser - Classifies palette input into one of six modes.

Grammar (evaluated top-down on every input change):
  ""                                  → command (empty filter)
  text                                → global search over the whole text
  /<cmd>                              → command picker filtered by <cmd>
  /pinned                             → global search for "tag:pinned"
  /search <profile?>                  → profile picker
  /search <profile> <scope?>          → scope picker
  /search <profile> <scope> <query>   → scoped query

A token only counts as confirmed once more input follows it or the input
ends in whitespace, so mode changes never happen mid-word. Choosing "All"
in a picker sets a skip flag, which jumps past that step.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union

from palette.search.catalog import ScopeCatalog
from palette.search.grammar import split_first_token, split_tokens, strip_leading_token

SEARCH_COMMAND = "search"
PINNED_COMMAND = "pinned"
PINNED_QUERY = "tag:pinned"


class Mode(str, Enum):
    IDLE = "idle"
    COMMAND = "command"
    PROFILE = "profile"
    SCOPE = "scope"
    QUERY = "query"
    GLOBAL = "global"


@dataclass(frozen=True)
class IdleState:
    mode: ClassVar[Mode] = Mode.IDLE


@dataclass(frozen=True)
class CommandState:
    command_query: str = ""
    mode: ClassVar[Mode] = Mode.COMMAND


@dataclass(frozen=True)
class ProfileState:
    profile_query: str = ""
    mode: ClassVar[Mode] = Mode.PROFILE


@dataclass(frozen=True)
class ScopeState:
    profile_id: str
    scope_query: str = ""
    mode: ClassVar[Mode] = Mode.SCOPE


@dataclass(frozen=True)
class QueryState:
    profile_id: Optional[str] = None
    scope_id: Optional[str] = None
    query: str = ""
    mode: ClassVar[Mode] = Mode.QUERY


@dataclass(frozen=True)
class GlobalState:
    query: str = ""
    mode: ClassVar[Mode] = Mode.GLOBAL


ParsedState = Union[IdleState, CommandState, ProfileState, ScopeState, QueryState, GlobalState]

PICKER_MODES = frozenset({Mode.COMMAND, Mode.PROFILE, Mode.SCOPE})
SEARCH_MODES = frozenset({Mode.QUERY, Mode.GLOBAL})


def is_search_mode(state: ParsedState) -> bool:
    return state.mode in SEARCH_MODES


def is_picker_mode(state: ParsedState) -> bool:
    return state.mode in PICKER_MODES


class ModeParser:
    """Turns raw input into a ParsedState using the current scope catalog."""

    def __init__(self, catalog: ScopeCatalog):
        self.catalog = catalog

    def parse(
        self,
        value: str,
        profile_skipped: bool = False,
        scope_skipped: bool = False,
    ) -> ParsedState:
        """
        Parse raw palette input.

        Args:
            value: Current input text
            profile_skipped: "All" was chosen at the profile step
            scope_skipped: "All" was chosen at the scope step

        Returns:
            The ParsedState variant for the active mode
        """
        if not value:
            return CommandState("")
        if not value.startswith("/"):
            return GlobalState(value)

        first = split_first_token(value[1:])
        command = first.token.strip()
        if not command:
            return CommandState("")

        normalized = command.lower()
        is_search = SEARCH_COMMAND.startswith(normalized)
        is_pinned = PINNED_COMMAND.startswith(normalized)

        if not is_search and not is_pinned:
            return CommandState(command)

        if is_pinned:
            if normalized != PINNED_COMMAND:
                return CommandState(command)
            return GlobalState(PINNED_QUERY)

        confirmed = normalized == SEARCH_COMMAND and (
            first.has_trailing_space or bool(first.rest.strip())
        )
        if not confirmed:
            return CommandState(command)

        if profile_skipped:
            return QueryState(profile_id=None, scope_id=None, query=first.rest.strip())

        return self._parse_profile(first.rest, scope_skipped)

    def _parse_profile(self, rest: str, scope_skipped: bool) -> ParsedState:
        """Resolve the profile segment after a confirmed /search."""
        info = split_tokens(rest)
        if not info.tokens:
            return ProfileState("")

        token = info.tokens[0]
        profile = self.catalog.find_profile(token)
        confirmed = profile is not None and (len(info.tokens) > 1 or info.has_trailing_space)
        if not confirmed:
            return ProfileState(token)

        after_profile = strip_leading_token(rest)
        if scope_skipped:
            return QueryState(profile_id=profile.id, scope_id=None, query=after_profile.strip())

        return self._parse_scope(profile.id, after_profile)

    def _parse_scope(self, profile_id: str, rest: str) -> ParsedState:
        """Resolve the plugin-scope segment after a confirmed profile."""
        info = split_tokens(rest)
        if not info.tokens:
            return ScopeState(profile_id, "")

        token = info.tokens[0]
        scope = self.catalog.find_scope(profile_id, token)
        confirmed = scope is not None and (len(info.tokens) > 1 or info.has_trailing_space)
        if not confirmed:
            return ScopeState(profile_id, token)

        return QueryState(
            profile_id=profile_id,
            scope_id=scope.plugin_id,
            query=" ".join(info.tokens[1:]),
        )
