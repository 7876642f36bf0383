import logging
from typing import Dict, List, Optional

from streetmap.config import settings
from streetmap.config.categories import CATEGORY_KEYS, get_category
from streetmap.models.entities import PointOfInterest
from streetmap.services.cache.base import KeyedFetchCache
from streetmap.services.geodata.normalizer import GeodataNormalizer
from streetmap.services.geodata.queries import BBox, build_category_query
from streetmap.services.geodata.source import GeodataSource

logger = logging.getLogger(__name__)


class CategoryCache(KeyedFetchCache[str, List[PointOfInterest]]):
    """POIs per category; a missing key means "not fetched yet", not "empty"."""

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
        self.bbox = bbox or settings.poi_bbox

    async def get_or_fetch(self, category: str) -> List[PointOfInterest]:
        """Cached POIs, or a single pass over the endpoints on a miss.

        Raises:
            UnknownCategory: category is not in the catalogue
            ServiceUnavailable: every endpoint failed; the category stays unpopulated
        """
        get_category(category)
        return await self._get_or_load(category)

    async def _load(self, category: str) -> List[PointOfInterest]:
        query = build_category_query(get_category(category), self.bbox)
        payload = await self.source.fetch(query)
        places = self.normalizer.normalize_places(payload, category)
        logger.info("Loaded %d %s", len(places), category)
        return places

    def populated(self) -> Dict[str, List[PointOfInterest]]:
        """Fetched categories in the order their fetches completed."""
        return dict(self._entries)

    def find(self, place_id: int, category: Optional[str] = None) -> Optional[PointOfInterest]:
        for key, places in self.populated().items():
            if category is not None and key != category:
                continue
            for place in places:
                if place.id == place_id:
                    return place
        return None

    def invalidate(self, category: Optional[str] = None) -> None:
        """Forget one category, or all of them."""
        keys = [category] if category is not None else CATEGORY_KEYS
        for key in keys:
            self._invalidate_key(key)
