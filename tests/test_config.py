"""
Tests for create_palette wiring.

Builds a palette from a real settings file against an httpx.MockTransport
backend and a temporary preferences database.
"""

import sqlite3

import httpx
import pytest

from conftest import wait_idle
from palette.config import create_palette
from palette.search.parser import Mode, QueryState


def _handler(request):
    if request.url.path == "/api/search/scopes":
        return httpx.Response(200, json={"scopes": [
            {"pluginId": "notes", "label": "Notes", "instances": [{"id": "default", "label": "Personal"}]},
        ]})
    return httpx.Response(200, json={"results": [{
        "pluginId": "notes",
        "instanceId": "default",
        "id": request.url.params["q"] or "browse",
        "title": "Found",
        "launch": {"panelType": "notes", "payload": {}},
    }]})


class TestCreatePalette:
    def test_settings_applied(self, tmp_settings, tmp_path):
        palette = create_palette(
            on_launch=lambda result, action: None,
            settings_path=tmp_settings,
            transport=httpx.MockTransport(_handler),
        )
        assert palette.scheduler.debounce_ms == 0
        assert palette.scheduler.limit == 25
        assert str(palette.preferences.db_path) == str(tmp_path / "prefs.db")
        palette.preferences.close()

    @pytest.mark.asyncio
    async def test_end_to_end_search(self, tmp_settings):
        statuses = []
        palette = create_palette(
            on_launch=lambda result, action: None,
            settings_path=tmp_settings,
            transport=httpx.MockTransport(_handler),
            set_status=statuses.append,
        )
        palette.open()
        await wait_idle(palette)

        palette.set_input("/search default notes milk")
        await wait_idle(palette)

        assert palette.state == QueryState("default", "notes", "milk")
        assert palette.mode == Mode.QUERY
        assert [r.id for r in palette.results] == ["milk"]
        assert statuses == []
        await palette.aclose()

    def test_zero_limit_means_server_default(self, tmp_path):
        settings = {
            "search": {"debounce_ms": 10, "limit": 0},
            "api": {"base_url": "http://search.test", "timeout": 1.0},
            "preferences": {"db_path": str(tmp_path / "p.db")},
        }
        palette = create_palette(
            on_launch=lambda result, action: None,
            settings=settings,
            transport=httpx.MockTransport(_handler),
        )
        assert palette.scheduler.limit is None
        assert palette.scheduler.debounce_ms == 10
        palette.preferences.close()

    @pytest.mark.asyncio
    async def test_aclose_releases_client_and_store(self, tmp_settings):
        palette = create_palette(
            on_launch=lambda result, action: None,
            settings_path=tmp_settings,
            transport=httpx.MockTransport(_handler),
        )
        palette.open()
        await wait_idle(palette)
        http_client = palette.search_client._client
        assert http_client is not None and not http_client.is_closed

        await palette.aclose()

        assert http_client.is_closed
        assert palette.search_client._client is None
        assert not palette.is_open
        with pytest.raises(sqlite3.ProgrammingError):
            palette.preferences._conn.execute("SELECT 1")
