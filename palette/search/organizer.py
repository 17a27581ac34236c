"""
Result Organizer - Sorting and grouping of fetched results.

Sort modes (applied first):
  - relevance: server order
  - items: list items, lists, notes, other (stable within each bucket)
  - plugin: plugin id A-Z, ties by original position

Group modes (applied after sorting):
  - none: flat list
  - plugin: one header per plugin in first-seen order
  - type: headers in fixed category order, empty groups omitted

The navigable sequence is the result rows in display order, so the row a
user focuses is always the row that gets launched.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from palette.search.models import SearchApiResult


class SortMode(str, Enum):
    RELEVANCE = "relevance"
    ITEMS = "items"
    PLUGIN = "plugin"


class GroupMode(str, Enum):
    NONE = "none"
    PLUGIN = "plugin"
    TYPE = "type"


DEFAULT_SORT_MODE = SortMode.RELEVANCE
DEFAULT_GROUP_MODE = GroupMode.NONE


class ResultCategory(Enum):
    LIST_ITEM = "listItem"
    LIST = "list"
    NOTE = "note"
    OTHER = "other"


CATEGORY_ORDER = (
    ResultCategory.LIST_ITEM,
    ResultCategory.LIST,
    ResultCategory.NOTE,
    ResultCategory.OTHER,
)

CATEGORY_LABELS = {
    ResultCategory.LIST_ITEM: "List items",
    ResultCategory.LIST: "Lists",
    ResultCategory.NOTE: "Notes",
    ResultCategory.OTHER: "Other",
}


@dataclass(frozen=True)
class HeaderEntry:
    label: str


@dataclass(frozen=True)
class ResultEntry:
    result: SearchApiResult
    index: int  # position in the navigable sequence


DisplayEntry = Union[HeaderEntry, ResultEntry]


@dataclass
class OrganizedResults:
    entries: list[DisplayEntry] = field(default_factory=list)
    ordered: list[SearchApiResult] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ordered)


def normalize_sort_mode(value: Optional[str]) -> SortMode:
    """Validate a stored sort mode, falling back to the default."""
    try:
        return SortMode(value)
    except ValueError:
        return DEFAULT_SORT_MODE


def normalize_group_mode(value: Optional[str]) -> GroupMode:
    """Validate a stored group mode, falling back to the default."""
    try:
        return GroupMode(value)
    except ValueError:
        return DEFAULT_GROUP_MODE


def result_category(result: SearchApiResult) -> ResultCategory:
    """
    Classify a result by its launch target.

    Lists panel results carrying an item id are list items, the rest of
    the lists panel results are lists. Notes panel results are notes.
    """
    panel_type = result.launch.panel_type
    if panel_type == "lists":
        if isinstance(result.launch.payload.get("itemId"), str):
            return ResultCategory.LIST_ITEM
        return ResultCategory.LIST
    if panel_type == "notes":
        return ResultCategory.NOTE
    return ResultCategory.OTHER


def sort_results(results: list[SearchApiResult], mode: SortMode) -> list[SearchApiResult]:
    """Return a new list ordered by the sort mode. Input is untouched."""
    if mode == SortMode.ITEMS:
        buckets: dict[ResultCategory, list[SearchApiResult]] = {c: [] for c in CATEGORY_ORDER}
        for result in results:
            buckets[result_category(result)].append(result)
        return [result for category in CATEGORY_ORDER for result in buckets[category]]

    if mode == SortMode.PLUGIN:
        # sorted() is stable, so ties keep their original order
        return sorted(results, key=lambda r: r.plugin_id.lower())

    return list(results)


def group_results(results: list[SearchApiResult], mode: GroupMode) -> list[DisplayEntry]:
    """Convert an ordered list into header/result display entries."""
    if mode == GroupMode.PLUGIN:
        grouped: dict[str, list[SearchApiResult]] = {}
        for result in results:
            grouped.setdefault(result.plugin_id or "unknown", []).append(result)
        sections = list(grouped.items())
    elif mode == GroupMode.TYPE:
        by_category: dict[ResultCategory, list[SearchApiResult]] = {c: [] for c in CATEGORY_ORDER}
        for result in results:
            by_category[result_category(result)].append(result)
        sections = [
            (CATEGORY_LABELS[category], by_category[category])
            for category in CATEGORY_ORDER
            if by_category[category]
        ]
    else:
        return [ResultEntry(result, index) for index, result in enumerate(results)]

    entries: list[DisplayEntry] = []
    index = 0
    for label, section in sections:
        entries.append(HeaderEntry(label))
        for result in section:
            entries.append(ResultEntry(result, index))
            index += 1
    return entries


def organize(
    results: list[SearchApiResult],
    sort_mode: SortMode,
    group_mode: GroupMode,
) -> OrganizedResults:
    """Sort, then group, returning display entries plus the navigable order."""
    if not results:
        return OrganizedResults()
    entries = group_results(sort_results(results, sort_mode), group_mode)
    ordered = [entry.result for entry in entries if isinstance(entry, ResultEntry)]
    return OrganizedResults(entries=entries, ordered=ordered)
