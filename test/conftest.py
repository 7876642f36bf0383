from typing import Dict, List, Optional

import pytest

from streetmap.config import settings
from streetmap.config.categories import get_category
from streetmap.services.geodata.errors import ServiceUnavailable, TransportFailure
from streetmap.services.geodata.queries import build_category_query
from streetmap.services.geodata.source import GeodataSource


def node(node_id: int, lat: float, lon: float, **tags) -> Dict:
    element = {"type": "node", "id": node_id, "lat": lat, "lon": lon}
    if tags:
        element["tags"] = tags
    return element


def way(way_id: int, nodes: List[int], **tags) -> Dict:
    return {"type": "way", "id": way_id, "nodes": nodes, "tags": tags}


def road_payload() -> Dict:
    """Small road dataset: two segments of one primary road, a residential
    street, an unnamed service road and a way with a single resolvable node."""
    return {
        "elements": [
            way(100, [1, 2, 3], highway="primary", name="Jidka Xorriyada"),
            way(101, [3, 4], highway="primary", name="Jidka Xorriyada"),
            way(102, [5, 6, 7, 8], highway="residential", name="Jidhka", **{"name:so": "Jidhka"}),
            way(103, [1, 5], highway="service"),
            way(104, [9, 99], highway="tertiary", name="Broken Street"),
            node(1, 9.560, 44.060),
            node(2, 9.561, 44.061),
            node(3, 9.562, 44.062),
            node(4, 9.563, 44.063),
            node(5, 9.550, 44.050),
            node(6, 9.551, 44.051),
            node(7, 9.552, 44.052),
            node(8, 9.553, 44.053),
            node(9, 9.554, 44.054),
        ]
    }


def hotel_payload() -> Dict:
    return {
        "elements": [
            node(500, 9.561, 44.065, tourism="hotel", name="Ambassador Hotel", phone="+252 2 123"),
            node(501, 9.562, 44.066, tourism="guest_house"),
            {
                "type": "way",
                "id": 502,
                "center": {"lat": 9.563, "lon": 44.067},
                "tags": {"tourism": "hotel", "name": "Mansoor Hotel"},
            },
            {"type": "way", "id": 503, "tags": {"tourism": "hotel", "name": "No Geometry"}},
        ]
    }


def restaurant_payload() -> Dict:
    return {
        "elements": [
            node(600, 9.560, 44.060, amenity="restaurant", name="Jidka Cafe"),
            node(601, 9.561, 44.061, amenity="cafe", name="Jidka Cafe"),
            node(602, 9.562, 44.062, amenity="fast_food", name="Summer Time"),
        ]
    }


class StubSource(GeodataSource):
    """In-memory geodata source keyed by category; records every call."""

    def __init__(
        self,
        roads: Optional[Dict] = None,
        places: Optional[Dict[str, Dict]] = None,
        *,
        failing: Optional[set] = None,
    ):
        self.roads = roads
        self.places = places or {}
        self.failing = failing or set()
        self.queries: List[str] = []
        self.road_calls = 0
        self._by_query = {
            build_category_query(get_category(key), settings.poi_bbox): key
            for key in self.places.keys() | self.failing
        }

    def _unavailable(self) -> ServiceUnavailable:
        return ServiceUnavailable([TransportFailure("stub://overpass", "down")])

    async def fetch(self, query, endpoints=None):
        self.queries.append(query)
        category = self._by_query.get(query)
        if category is None or category in self.failing:
            raise self._unavailable()
        return self.places[category]

    async def fetch_with_retry(self, query, *, attempts=None, base_delay=None, on_retry=None):
        self.road_calls += 1
        if self.roads is None:
            raise ServiceUnavailable([], attempts=attempts or settings.road_fetch_attempts)
        return self.roads


async def no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def stub_source():
    return StubSource(
        roads=road_payload(),
        places={"hotels": hotel_payload(), "restaurants": restaurant_payload()},
        failing={"banks"},
    )
