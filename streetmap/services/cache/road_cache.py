import logging
from typing import Dict, List, Optional

from streetmap.config import settings
from streetmap.models.entities import RoadSegment
from streetmap.services.cache.base import KeyedFetchCache
from streetmap.services.geodata.normalizer import GeodataNormalizer
from streetmap.services.geodata.queries import BBox, build_road_query
from streetmap.services.geodata.source import GeodataSource, RetryHook

logger = logging.getLogger(__name__)

_ROADS = "roads"


class RoadCache(KeyedFetchCache[str, List[RoadSegment]]):
    """The full road dataset, fetched at most once unless invalidated."""

    def __init__(
        self,
        source: GeodataSource,
        normalizer: Optional[GeodataNormalizer] = None,
        *,
        bbox: Optional[BBox] = None,
    ):
        super().__init__()
        self.source = source
        self.normalizer = normalizer or GeodataNormalizer()
        self.bbox = bbox or settings.road_bbox
        self._on_retry: Optional[RetryHook] = None
        self._by_id: Dict[int, RoadSegment] = {}

    @property
    def roads(self) -> List[RoadSegment]:
        return self.get(_ROADS) or []

    @property
    def is_loaded(self) -> bool:
        return self.contains(_ROADS)

    def find(self, road_id: int) -> Optional[RoadSegment]:
        if not self._by_id and self.is_loaded:
            self._by_id = {road.id: road for road in self.roads}
        return self._by_id.get(road_id)

    async def get_or_fetch(self, on_retry: Optional[RetryHook] = None) -> List[RoadSegment]:
        """Cached roads, or fetch with retry and backoff on a miss.

        ``on_retry`` only applies when this call starts the load.

        Raises:
            ServiceUnavailable: terminal failure after all attempts
        """
        if not self.is_loaded and not self.is_loading(_ROADS):
            self._on_retry = on_retry
        return await self._get_or_load(_ROADS)

    async def _load(self, key: str) -> List[RoadSegment]:
        query = build_road_query(self.bbox)
        payload = await self.source.fetch_with_retry(query, on_retry=self._on_retry)
        roads = self.normalizer.normalize_roads(payload)
        logger.info("Loaded %d roads", len(roads))
        return roads

    def invalidate(self) -> None:
        self._invalidate_key(_ROADS)
        self._by_id = {}
