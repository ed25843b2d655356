"""
Debounced, cancelable symbol search.

Each query gets a generation number. Issuing a new query cancels the
pending (or in-flight) request, and a response is applied only if its
generation is still the latest one: last request wins, not last response.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Callable, List, Optional

from portfolio_engine.domain.errors import SearchError
from portfolio_engine.domain.models import SearchResult, SearchState
from portfolio_engine.infrastructure.market_data.types import SymbolSearchProvider

logger = logging.getLogger(__name__)


class SymbolSearchService:
    def __init__(
        self,
        provider: Optional[SymbolSearchProvider],
        debounce_seconds: float = 0.3,
        limit: int = 50,
        timeout_seconds: float = 10.0,
        on_change: Optional[Callable[[SearchState], None]] = None,
    ):
        self._provider = provider
        self.debounce_seconds = debounce_seconds
        self.limit = limit
        self.timeout_seconds = timeout_seconds
        self._on_change = on_change
        self._state = SearchState()
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def _set_state(self, state: SearchState) -> None:
        self._state = state
        if self._on_change:
            self._on_change(state)

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def set_query(self, query: str) -> int:
        """
        Register a new query. Must be called from within the event loop.

        Returns the generation assigned to this query.
        """
        self._generation += 1
        generation = self._generation
        self._cancel_pending()

        if not (query or "").strip():
            self._set_state(SearchState(query=query or "", generation=generation))
            return generation

        # previous results stay visible until the new ones land
        self._set_state(
            replace(self._state, query=query, is_searching=True, error=None, generation=generation)
        )
        self._task = asyncio.get_running_loop().create_task(self._run(generation, query))
        return generation

    async def _run(self, generation: int, query: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if generation != self._generation:
            return

        results: List[SearchResult] = []
        error: Optional[str] = None
        if self._provider is None:
            error = "Symbol search is not configured"
        else:
            try:
                results = await asyncio.wait_for(
                    self._provider.search_symbols(query.strip(), self.limit),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError:
                error = "Search timed out"
            except SearchError as exc:
                error = exc.message
            except Exception as exc:
                logger.warning("Unexpected search failure for %r: %s", query, exc)
                error = "Search failed"

        if generation != self._generation:
            logger.debug("Discarding stale search results for %r", query)
            return

        self._set_state(
            SearchState(
                query=query,
                results=tuple(results[: self.limit]),
                is_searching=False,
                error=error,
                generation=generation,
            )
        )

    async def wait_idle(self) -> None:
        """Wait until the latest query has settled."""
        while self._task is not None and not self._task.done():
            task = self._task
            await asyncio.gather(task, return_exceptions=True)

    def cancel(self) -> None:
        self._generation += 1
        self._cancel_pending()
        if self._state.is_searching:
            self._set_state(replace(self._state, is_searching=False, generation=self._generation))

    def clear(self) -> None:
        self.cancel()
        self._set_state(SearchState(generation=self._generation))
