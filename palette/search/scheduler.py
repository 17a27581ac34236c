"""
Search Scheduler - Debounced, cancellation-safe search requests.

Every re-parse hands the current state to schedule(). The scheduler:
  - ignores states whose identity key ("query::profile::scope") is unchanged
  - keeps a single debounce timer; starting a new one cancels the old one
  - stamps each request with a monotonically increasing token

A response is applied only if its token is still the latest one issued.
Superseded responses are dropped, never merged. The underlying coroutine is
not aborted; its result is simply ignored.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from palette.search.models import SearchApiResult, SearchRequest, SearchResponse
from palette.search.parser import GlobalState, ParsedState, QueryState

DEFAULT_DEBOUNCE_MS = 150

FetchResults = Callable[[SearchRequest], Awaitable[SearchResponse]]


def query_key(query: str, profile_id: Optional[str], scope_id: Optional[str]) -> str:
    """Identity key used to suppress redundant re-fetches."""
    return f"{query}::{profile_id or ''}::{scope_id or ''}"


class SearchScheduler:
    """
    Owns the in-flight search and the last applied result set.

    Callbacks:
        on_results(results): a current request succeeded
        on_error(exc): a current request failed
        on_cleared(): results were cleared synchronously
    """

    def __init__(
        self,
        fetch_results: FetchResults,
        on_results: Callable[[list[SearchApiResult]], None],
        on_error: Callable[[Exception], None],
        on_cleared: Optional[Callable[[], None]] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        limit: Optional[int] = None,
    ):
        self.fetch_results = fetch_results
        self.on_results = on_results
        self.on_error = on_error
        self.on_cleared = on_cleared
        self.debounce_ms = debounce_ms
        self.limit = limit

        self.results: list[SearchApiResult] = []
        self.loading = False
        self.last_key = ""
        self.issued = 0  # fetches actually started

        self._token = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def token(self) -> int:
        return self._token

    def schedule(self, state: ParsedState) -> bool:
        """
        Schedule a search for the state if its identity key changed.

        Args:
            state: The freshly parsed state

        Returns:
            True if a new debounced fetch was started
        """
        if not isinstance(state, (QueryState, GlobalState)):
            self._clear()
            return False

        query = state.query.strip()
        profile_id = state.profile_id if isinstance(state, QueryState) else None
        scope_id = state.scope_id if isinstance(state, QueryState) else None

        # TODO: confirm with product whether an unscoped empty query should browse too
        allow_empty = bool(profile_id or scope_id)
        if not query and not allow_empty:
            self._clear()
            return False

        key = query_key(query, profile_id, scope_id)
        if key == self.last_key:
            return False
        self.last_key = key

        self._cancel_timer()
        self._token += 1
        token = self._token
        self.loading = True

        if not query:
            # Browse request: drop the previous query's rows right away
            self.results = []
            if self.on_cleared:
                self.on_cleared()

        request = SearchRequest(
            query=query,
            profiles=(profile_id,) if profile_id else None,
            plugin=scope_id or None,
            limit=self.limit,
        )
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(
            self.debounce_ms / 1000,
            self._fire,
            token,
            request,
        )
        logger.debug(f"Scheduled search #{token} for {key!r}")
        return True

    def cancel(self) -> None:
        """Forget any pending or in-flight request (palette closing)."""
        self._cancel_timer()
        self._token += 1
        self.loading = False

    def reset(self) -> None:
        """Cancel and drop all cached state."""
        self.cancel()
        self.results = []
        self.last_key = ""
        self._task = None

    def _clear(self) -> None:
        self._cancel_timer()
        self._token += 1
        self.loading = False
        self.results = []
        self.last_key = ""

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, token: int, request: SearchRequest) -> None:
        self._timer = None
        if token != self._token:
            return
        self.issued += 1
        self._task = asyncio.get_running_loop().create_task(self._run(token, request))

    async def _run(self, token: int, request: SearchRequest) -> None:
        try:
            response = await self.fetch_results(request)
        except Exception as exc:
            if token != self._token:
                logger.debug(f"Dropping failure of superseded search #{token}")
                return
            logger.exception(f"Search failed for query {request.query!r}")
            self.loading = False
            self.results = []
            self._notify(self.on_error, exc)
            return

        if token != self._token:
            logger.debug(f"Dropping superseded search #{token}")
            return

        results = response.results if isinstance(response.results, list) else []
        self.loading = False
        self.results = list(results)
        logger.debug(f"Applied search #{token}: {len(self.results)} results")
        self._notify(self.on_results, self.results)

    def _notify(self, callback: Callable[..., Any], *args: Any) -> None:
        """Run an engine callback, logging instead of raising on failure."""
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Search callback {getattr(callback, '__name__', callback)!r} failed")
