"""
Search Models - Value types exchanged with the search backend.

The backend speaks camelCase JSON; from_dict() constructors translate it
into frozen dataclasses. The engine never mutates a received result, it only
reorders and groups them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from loguru import logger


class LaunchAction(str, Enum):
    """How a result should be opened by the host."""

    MODAL = "modal"
    WORKSPACE = "workspace"
    PIN = "pin"
    REPLACE = "replace"


@dataclass(frozen=True)
class ScopeInstance:
    id: str
    label: str = ""


@dataclass(frozen=True)
class SearchableScope:
    """A plugin-provided searchable source and the profiles it covers."""

    plugin_id: str
    label: str = ""
    instances: tuple[ScopeInstance, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "SearchableScope":
        instances = []
        for raw in data.get("instances") or []:
            if not isinstance(raw, dict) or not isinstance(raw.get("id"), str):
                continue
            instances.append(ScopeInstance(id=raw["id"], label=str(raw.get("label") or "")))
        return cls(
            plugin_id=str(data["pluginId"]),
            label=str(data.get("label") or ""),
            instances=tuple(instances),
        )

    def has_instance(self, profile_id: str) -> bool:
        """Case-insensitive check whether this scope belongs to a profile."""
        wanted = profile_id.lower()
        return any(instance.id.lower() == wanted for instance in self.instances)


@dataclass(frozen=True)
class LaunchTarget:
    panel_type: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SearchApiResult:
    """A single search hit. Immutable once received."""

    plugin_id: str
    instance_id: str
    id: str
    title: str
    launch: LaunchTarget
    subtitle: Optional[str] = None
    snippet: Optional[str] = None
    score: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SearchApiResult":
        launch = data.get("launch") or {}
        payload = launch.get("payload")
        return cls(
            plugin_id=str(data["pluginId"]),
            instance_id=str(data.get("instanceId") or ""),
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            launch=LaunchTarget(
                panel_type=str(launch.get("panelType") or ""),
                payload=payload if isinstance(payload, dict) else {},
            ),
            subtitle=data.get("subtitle"),
            snippet=data.get("snippet"),
            score=data.get("score"),
        )


@dataclass(frozen=True)
class SearchRequest:
    """Arguments for one fetch_results() call."""

    query: str
    profiles: Optional[tuple[str, ...]] = None
    plugin: Optional[str] = None
    limit: Optional[int] = None

    def to_params(self) -> dict[str, str]:
        """Query-string parameters understood by GET /api/search."""
        params = {"q": self.query}
        if self.profiles:
            params["profiles"] = ",".join(self.profiles)
        if self.plugin:
            params["plugin"] = self.plugin
        if self.limit is not None:
            params["limit"] = str(self.limit)
        return params


@dataclass(frozen=True)
class SearchResponse:
    results: list[SearchApiResult] = field(default_factory=list)
    timing: Optional[dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SearchResponse":
        raw_results = data.get("results")
        if not isinstance(raw_results, list):
            raw_results = []
        timing = data.get("timing")
        return cls(
            results=parse_results(raw_results),
            timing=timing if isinstance(timing, dict) else None,
        )


def parse_scopes(items: list) -> list[SearchableScope]:
    """Parse a scope payload, skipping malformed entries."""
    scopes = []
    for item in items:
        try:
            scopes.append(SearchableScope.from_dict(item))
        except (KeyError, TypeError, AttributeError):
            logger.warning(f"Skipping malformed search scope: {item!r}")
    return scopes


def parse_results(items: list) -> list[SearchApiResult]:
    """Parse a result payload, skipping malformed entries."""
    results = []
    for item in items:
        try:
            results.append(SearchApiResult.from_dict(item))
        except (KeyError, TypeError, AttributeError):
            logger.warning(f"Skipping malformed search result: {item!r}")
    return results
