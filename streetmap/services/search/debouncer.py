import asyncio
import logging
from typing import Awaitable, Callable, Optional, Union

from streetmap.config import settings
from streetmap.models.response import SearchResults

logger = logging.getLogger(__name__)

ResultCallback = Callable[[SearchResults], Union[None, Awaitable[None]]]
SearchFn = Callable[[str], SearchResults]


class SearchDebouncer:
    """Run a search only after typing pauses; each keystroke replaces the pending search."""

    def __init__(
        self,
        search: SearchFn,
        on_results: ResultCallback,
        *,
        delay: Optional[float] = None,
    ):
        self._search = search
        self._on_results = on_results
        self.delay = delay if delay is not None else settings.search_debounce_s
        self._pending: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self, query: str) -> asyncio.Task:
        """Cancel the pending search and schedule this one after the delay"""
        self.cancel()
        self._pending = asyncio.ensure_future(self._run_later(query))
        return self._pending

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def search_now(self, query: str) -> SearchResults:
        """Search immediately, e.g. on Enter or the search button"""
        self.cancel()
        return await self._deliver(query)

    async def _run_later(self, query: str) -> None:
        await asyncio.sleep(self.delay)
        await self._deliver(query)

    async def _deliver(self, query: str) -> SearchResults:
        results = self._search(query.strip())
        outcome = self._on_results(results)
        if asyncio.iscoroutine(outcome):
            await outcome
        return results
