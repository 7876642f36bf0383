import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from streetmap.config import settings
from streetmap.config.categories import CATEGORY_KEYS
from streetmap.services.cache.category_cache import CategoryCache
from streetmap.services.geodata.errors import GeodataError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class CategoryPreloader:
    """Fill the category cache in the background, one category per stagger step"""

    def __init__(
        self,
        cache: CategoryCache,
        *,
        stagger: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.cache = cache
        self.stagger = stagger if stagger is not None else settings.preload_stagger_s
        self._sleep = sleep

    async def preload(self, categories: Optional[List[str]] = None) -> Dict[str, bool]:
        """Start category i after i * stagger seconds; returns which ones loaded"""
        keys = categories or CATEGORY_KEYS
        tasks = [
            asyncio.ensure_future(self._preload_one(key, index * self.stagger))
            for index, key in enumerate(keys)
        ]
        outcomes = await asyncio.gather(*tasks)
        return dict(zip(keys, outcomes))

    async def _preload_one(self, category: str, delay: float) -> bool:
        if delay > 0:
            await self._sleep(delay)
        if self.cache.contains(category):
            return True
        try:
            await self.cache.get_or_fetch(category)
        except GeodataError as exc:
            # The category stays unpopulated; selecting it later retries
            logger.warning("Background load of %s failed: %s", category, exc)
            return False
        return True
