"""Single-flight, all-or-nothing cache keyed by dataset name."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class KeyedFetchCache(ABC, Generic[K, V]):
    """Entries are either absent or fully populated.

    Concurrent requests for the same missing key share one in-flight load.
    ``invalidate`` bumps a per-key generation so a load that started before it
    can finish but never overwrites the cache.
    """

    def __init__(self) -> None:
        self._entries: Dict[K, V] = {}
        self._inflight: Dict[K, "asyncio.Task[V]"] = {}
        self._generations: Dict[K, int] = {}

    @abstractmethod
    async def _load(self, key: K) -> V:
        """Fetch and normalize the dataset for ``key``."""

    def get(self, key: K) -> Optional[V]:
        return self._entries.get(key)

    def contains(self, key: K) -> bool:
        return key in self._entries

    def is_loading(self, key: K) -> bool:
        return key in self._inflight

    async def _get_or_load(self, key: K) -> V:
        if key in self._entries:
            return self._entries[key]

        task = self._inflight.get(key)
        if task is None:
            generation = self._generations.get(key, 0)
            task = asyncio.ensure_future(self._load_and_store(key, generation))
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._clear_inflight(key, done))
        else:
            logger.debug("Joining in-flight load for %s", key)

        return await asyncio.shield(task)

    async def _load_and_store(self, key: K, generation: int) -> V:
        value = await self._load(key)
        if self._generations.get(key, 0) == generation:
            self._entries[key] = value
        else:
            logger.info("Discarding stale load for %s", key)
        return value

    def _clear_inflight(self, key: K, task: "asyncio.Task[V]") -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    def _invalidate_key(self, key: K) -> None:
        self._generations[key] = self._generations.get(key, 0) + 1
        self._entries.pop(key, None)
        self._inflight.pop(key, None)
