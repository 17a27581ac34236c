"""
Search API Client - HTTP implementation of the palette's data source.

Endpoints:
  GET /api/search/scopes   → {"scopes": [...]}
  GET /api/search?q=...    → {"results": [...], "timing": {...}}

Any transport error or non-2xx status raises SearchApiError; the palette
turns that into an empty result set and a status message.
"""

from typing import Optional

import httpx
from loguru import logger

from palette.search.models import (
    SearchableScope,
    SearchRequest,
    SearchResponse,
    parse_scopes,
)


class SearchApiError(Exception):
    """A search backend request failed."""


class SearchApiClient:
    """Async client for the search backend."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _get_json(self, path: str, params: Optional[dict] = None) -> dict:
        try:
            response = await self._get_client().get(path, params=params)
        except httpx.HTTPError as exc:
            raise SearchApiError(f"Request to {path} failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise SearchApiError(f"Request to {path} failed: {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise SearchApiError(f"Invalid JSON from {path}") from exc
        return data if isinstance(data, dict) else {}

    async def fetch_scopes(self) -> list[SearchableScope]:
        """List searchable plugin scopes and their profile instances."""
        data = await self._get_json("/api/search/scopes")
        scopes = data.get("scopes")
        if not isinstance(scopes, list):
            return []
        parsed = parse_scopes(scopes)
        logger.debug(f"Fetched {len(parsed)} search scopes")
        return parsed

    async def fetch_results(self, request: SearchRequest) -> SearchResponse:
        """Run a search."""
        data = await self._get_json("/api/search", params=request.to_params())
        return SearchResponse.from_dict(data)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
