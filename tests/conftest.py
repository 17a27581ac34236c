"""
Shared test fixtures for the palette engine test suite.

Provides temporary preference databases and settings files that use real
file I/O, plus an in-process search backend and host whose behaviour the
tests can script (delays, failures, selected panel, launch outcome).
"""

import asyncio
import sqlite3

import pytest
import toml

from palette.panels.palette import CommandPalette
from palette.search.models import (
    LaunchTarget,
    ScopeInstance,
    SearchableScope,
    SearchApiResult,
    SearchResponse,
)
from palette.services.preferences import PreferencesService


def make_result(plugin_id, result_id, panel_type="other", item_id=None, instance_id="default"):
    """Build a SearchApiResult with a launch target of the given panel type."""
    payload = {"itemId": item_id} if item_id else {}
    return SearchApiResult(
        plugin_id=plugin_id,
        instance_id=instance_id,
        id=result_id,
        title=f"{plugin_id} {result_id}",
        launch=LaunchTarget(panel_type=panel_type, payload=payload),
    )


class FakeBackend:
    """Scriptable stand-in for the search backend."""

    def __init__(self, scopes):
        self.scopes = scopes
        self.responses = {}
        self.gates = {}
        self.requests = []
        self.fail_scopes = False
        self.fail_search = False

    async def fetch_scopes(self):
        if self.fail_scopes:
            raise RuntimeError("scopes unavailable")
        return list(self.scopes)

    async def fetch_results(self, request):
        self.requests.append(request)
        gate = self.gates.get(request.query)
        if gate is not None:
            await gate.wait()
        if self.fail_search:
            raise RuntimeError("search unavailable")
        return SearchResponse(results=list(self.responses.get(request.query, [])))


class FakeHost:
    """Records what the palette asks of its host."""

    def __init__(self):
        self.selected_panel = None
        self.launch_return = None
        self.launches = []
        self.statuses = []
        self.icon_requests = []
        self.mobile = False

    def get_selected_panel_id(self):
        return self.selected_panel

    def on_launch(self, result, action):
        self.launches.append((result, action))
        return self.launch_return

    def set_status(self, message):
        self.statuses.append(message)

    def resolve_icon(self, result):
        self.icon_requests.append(result)
        return "<svg></svg>"

    def is_mobile_viewport(self):
        return self.mobile


async def settle(delay=0.02):
    """Let pending timers and fetch tasks run."""
    await asyncio.sleep(delay)


async def drain(scheduler):
    """Wait until the scheduler has no pending debounce timer or running fetch."""
    loop = asyncio.get_running_loop()
    while True:
        if scheduler._timer is not None:
            await asyncio.sleep(max(0.0, scheduler._timer.when() - loop.time()))
        elif scheduler._task is not None and not scheduler._task.done():
            await asyncio.wait({scheduler._task})
        else:
            return


async def wait_idle(palette):
    """Wait for the palette's scope load and any pending search to settle."""
    task = palette._scopes_task
    if task is not None and not task.done():
        await asyncio.wait({task})
    await drain(palette.scheduler)


@pytest.fixture
def scopes():
    return [
        SearchableScope(
            plugin_id="notes",
            label="Notes",
            instances=(ScopeInstance("default", "Personal"), ScopeInstance("work", "Work")),
        ),
        SearchableScope(
            plugin_id="lists",
            label="Lists",
            instances=(ScopeInstance("default", "Personal"),),
        ),
        SearchableScope(
            plugin_id="calendar",
            label="Calendar",
            instances=(ScopeInstance("work", "Work"),),
        ),
    ]


@pytest.fixture
def tmp_db(tmp_path):
    """Create a real SQLite database with PreferencesService-compatible schema."""
    db_path = tmp_path / "preferences.db"
    conn = sqlite3.connect(str(db_path))
    conn.execute("""
        CREATE TABLE IF NOT EXISTS preferences (
            key TEXT PRIMARY KEY,
            value TEXT
        )
    """)
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "search": {"debounce_ms": 0, "limit": 25},
        "api": {"base_url": "http://search.test", "timeout": 5.0},
        "preferences": {"db_path": str(tmp_path / "prefs.db")},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


@pytest.fixture
def preferences(tmp_db):
    svc = PreferencesService(tmp_db)
    yield svc
    svc.close()


@pytest.fixture
def backend(scopes):
    return FakeBackend(scopes)


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def palette(backend, host, preferences):
    return CommandPalette(
        fetch_scopes=backend.fetch_scopes,
        fetch_results=backend.fetch_results,
        get_selected_panel_id=host.get_selected_panel_id,
        on_launch=host.on_launch,
        resolve_icon=host.resolve_icon,
        set_status=host.set_status,
        is_mobile_viewport=host.is_mobile_viewport,
        preferences=preferences,
        debounce_ms=0,
    )
