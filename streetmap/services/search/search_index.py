"""
Unified search over cached roads and places
Places first in fetch order, then roads ranked prefix-first and alphabetically.
"""
import logging
from typing import Iterable, List, Optional, Set, Tuple

from streetmap.config import settings
from streetmap.models.entities import EntityKind, PointOfInterest, RoadSegment
from streetmap.models.response import SearchHit, SearchResults
from streetmap.services.cache.category_cache import CategoryCache
from streetmap.services.cache.road_cache import RoadCache
from streetmap.services.search.highlight import collation_key, split_match

logger = logging.getLogger(__name__)


class SearchIndex:
    """Case-insensitive substring search across both entity types"""

    def __init__(
        self,
        road_cache: RoadCache,
        category_cache: CategoryCache,
        *,
        max_places: Optional[int] = None,
        max_roads: Optional[int] = None,
        max_roads_without_places: Optional[int] = None,
    ):
        self.road_cache = road_cache
        self.category_cache = category_cache
        self.max_places = max_places if max_places is not None else settings.max_place_results
        self.max_roads = max_roads if max_roads is not None else settings.max_road_results
        self.max_roads_without_places = (
            max_roads_without_places
            if max_roads_without_places is not None
            else settings.max_road_results_without_places
        )

    def search(self, query: str) -> SearchResults:
        query = (query or "").strip()
        if not query:
            return SearchResults(query=query)

        needle = query.lower()
        places = self.match_places(needle)[: self.max_places]
        road_cap = self.max_roads if places else self.max_roads_without_places
        roads = self.match_roads(needle)[:road_cap]

        logger.debug(
            "Search %r: %d places, %d roads", query, len(places), len(roads)
        )
        return SearchResults(
            query=query,
            places=[self._place_hit(place, query) for place in places],
            roads=[self._road_hit(road, query) for road in roads],
        )

    def _all_places(self) -> Iterable[PointOfInterest]:
        for places in self.category_cache.populated().values():
            yield from places

    def match_places(self, needle: str) -> List[PointOfInterest]:
        """Matching places de-duplicated by (name, category), in natural order"""
        seen: Set[Tuple[str, str]] = set()
        matches: List[PointOfInterest] = []
        for place in self._all_places():
            if not place.name or needle not in place.name.lower():
                continue
            key = (place.name, place.category)
            if key in seen:
                continue
            seen.add(key)
            matches.append(place)
        return matches

    def match_roads(self, needle: str) -> List[RoadSegment]:
        """Matching roads de-duplicated by name, prefix matches first then alphabetical"""
        seen: Set[str] = set()
        matches: List[RoadSegment] = []
        for road in self.road_cache.roads:
            if not road.name or needle not in road.name.lower():
                continue
            if road.name in seen:
                continue
            seen.add(road.name)
            matches.append(road)

        matches.sort(
            key=lambda road: (
                not road.name.lower().startswith(needle),
                collation_key(road.name),
            )
        )
        return matches

    @staticmethod
    def _place_hit(place: PointOfInterest, query: str) -> SearchHit:
        return SearchHit(
            kind=EntityKind.PLACE,
            id=place.id,
            name=place.name,
            type_label=place.subtype or place.category,
            category=place.category,
            highlight=split_match(place.name, query),
        )

    @staticmethod
    def _road_hit(road: RoadSegment, query: str) -> SearchHit:
        return SearchHit(
            kind=EntityKind.ROAD,
            id=road.id,
            name=road.name,
            type_label=road.type_label,
            highlight=split_match(road.name, query),
        )
