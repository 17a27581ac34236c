"""
Command Options Handler - The fixed slash-command list.

Typing "/" lists every command; further characters filter by id prefix:
  /s  → Search
  /p  → Pinned
"""

from palette.search.parser import CommandState, ParsedState
from palette.search.router import OptionItem

COMMAND_OPTIONS = (
    OptionItem(
        id="search",
        label="Search",
        description="Search notes, lists, and more",
        kind="command",
    ),
    OptionItem(
        id="pinned",
        label="Pinned",
        description="Show pinned notes and lists",
        kind="command",
    ),
)


class CommandOptionsHandler:
    """Suggest slash commands while the command token is being typed."""

    name = "commands"
    priority = 100

    def matches(self, state: ParsedState) -> bool:
        return isinstance(state, CommandState)

    def get_options(self, state: ParsedState) -> list[OptionItem]:
        q = state.command_query.strip().lower()
        if not q:
            return list(COMMAND_OPTIONS)
        return [option for option in COMMAND_OPTIONS if option.id.startswith(q)]
