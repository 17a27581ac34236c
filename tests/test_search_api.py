"""
Tests for the HTTP search client.

Requests are served by httpx.MockTransport so no network is touched.
"""

import httpx
import pytest

from palette.search.models import SearchRequest
from palette.services.search_api import SearchApiClient, SearchApiError

SCOPES_PAYLOAD = {
    "scopes": [
        {
            "pluginId": "notes",
            "label": "Notes",
            "instances": [{"id": "default", "label": "Personal"}, {"id": "work"}],
        },
        {"label": "missing plugin id"},
        {"pluginId": "lists", "label": "Lists", "instances": [{"id": "default"}]},
    ]
}

RESULTS_PAYLOAD = {
    "results": [
        {
            "pluginId": "notes",
            "instanceId": "default",
            "id": "n1",
            "title": "Groceries",
            "subtitle": "Personal",
            "snippet": "milk, eggs",
            "score": 0.9,
            "launch": {"panelType": "notes", "payload": {"noteId": "n1"}},
        },
        {"title": "no ids"},
    ],
    "timing": {"totalMs": 12},
}


def _client(handler):
    return SearchApiClient(base_url="http://search.test/", transport=httpx.MockTransport(handler))


class TestFetchScopes:
    @pytest.mark.asyncio
    async def test_parses_and_skips_malformed(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json=SCOPES_PAYLOAD)

        client = _client(handler)
        scopes = await client.fetch_scopes()
        await client.aclose()

        assert seen == ["/api/search/scopes"]
        assert [s.plugin_id for s in scopes] == ["notes", "lists"]
        assert [i.id for i in scopes[0].instances] == ["default", "work"]
        assert scopes[0].instances[1].label == ""

    @pytest.mark.asyncio
    async def test_missing_scopes_key_is_empty(self):
        client = _client(lambda request: httpx.Response(200, json={"scopes": None}))
        assert await client.fetch_scopes() == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        client = _client(lambda request: httpx.Response(503))
        with pytest.raises(SearchApiError):
            await client.fetch_scopes()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        client = _client(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(SearchApiError):
            await client.fetch_scopes()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = _client(handler)
        with pytest.raises(SearchApiError):
            await client.fetch_scopes()
        await client.aclose()


class TestFetchResults:
    @pytest.mark.asyncio
    async def test_query_params(self):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            return httpx.Response(200, json=RESULTS_PAYLOAD)

        client = _client(handler)
        await client.fetch_results(SearchRequest(
            query="milk",
            profiles=("default", "work"),
            plugin="notes",
            limit=10,
        ))
        await client.aclose()

        assert seen == [{"q": "milk", "profiles": "default,work", "plugin": "notes", "limit": "10"}]

    @pytest.mark.asyncio
    async def test_unscoped_query_sends_only_q(self):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            return httpx.Response(200, json={"results": []})

        client = _client(handler)
        response = await client.fetch_results(SearchRequest(query="milk"))
        await client.aclose()

        assert seen == [{"q": "milk"}]
        assert response.results == []
        assert response.timing is None

    @pytest.mark.asyncio
    async def test_parses_results(self):
        client = _client(lambda request: httpx.Response(200, json=RESULTS_PAYLOAD))
        response = await client.fetch_results(SearchRequest(query="milk"))
        await client.aclose()

        assert len(response.results) == 1
        result = response.results[0]
        assert result.plugin_id == "notes"
        assert result.title == "Groceries"
        assert result.launch.panel_type == "notes"
        assert result.launch.payload == {"noteId": "n1"}
        assert result.score == 0.9
        assert response.timing == {"totalMs": 12}

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        client = _client(lambda request: httpx.Response(500, json={"error": "boom"}))
        with pytest.raises(SearchApiError):
            await client.fetch_results(SearchRequest(query="milk"))
        await client.aclose()
