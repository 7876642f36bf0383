"""Turns raw Overpass elements into RoadSegment and PointOfInterest entities."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from streetmap.config.categories import (
    ALTERNATE_NAME_TAG_PRIORITY,
    get_category,
    resolve_name,
)
from streetmap.config.road_types import ROAD_CLASS_TAG, classify_road
from streetmap.models.entities import Coordinate, PointOfInterest, RoadSegment
from streetmap.services.geodata.errors import MalformedGeometry

logger = logging.getLogger(__name__)

NodeLookup = Dict[int, Coordinate]


def _elements(payload: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Elements that are mappings with an integer id."""
    elements = payload.get("elements") if isinstance(payload, Mapping) else None
    if not isinstance(elements, list):
        return []
    return [
        element
        for element in elements
        if isinstance(element, dict) and isinstance(element.get("id"), int)
    ]


def _coordinate(record: Any) -> Optional[Coordinate]:
    """Read a {lat, lon} mapping."""
    if not isinstance(record, Mapping):
        return None
    lat, lon = record.get("lat"), record.get("lon")
    if lat is None or lon is None:
        return None
    try:
        return (float(lat), float(lon))
    except (TypeError, ValueError):
        return None


def _string_tags(element: Mapping[str, Any]) -> Dict[str, str]:
    tags = element.get("tags")
    if not isinstance(tags, Mapping):
        return {}
    return {str(key): str(value) for key, value in tags.items() if value is not None}


class GeodataNormalizer:
    """Normalize query-service payloads into immutable entities."""

    def build_node_lookup(self, elements: Iterable[Mapping[str, Any]]) -> NodeLookup:
        lookup: NodeLookup = {}
        for element in elements:
            if element.get("type") != "node":
                continue
            coordinate = _coordinate(element)
            if coordinate is not None and "id" in element:
                lookup[element["id"]] = coordinate
        return lookup

    def resolve_way_geometry(
        self, element: Mapping[str, Any], nodes: NodeLookup
    ) -> List[Coordinate]:
        """Inline geometry when present, otherwise node references in order."""
        inline = element.get("geometry")
        if isinstance(inline, list) and inline:
            return [c for c in (_coordinate(point) for point in inline) if c is not None]

        coordinates: List[Coordinate] = []
        for node_id in element.get("nodes") or []:
            coordinate = nodes.get(node_id)
            if coordinate is not None:
                coordinates.append(coordinate)
        return coordinates

    def normalize_roads(self, payload: Mapping[str, Any]) -> List[RoadSegment]:
        elements = _elements(payload)
        nodes = self.build_node_lookup(elements)
        roads: List[RoadSegment] = []
        dropped = 0

        for element in elements:
            if element.get("type") != "way":
                continue
            tags = _string_tags(element)
            if ROAD_CLASS_TAG not in tags:
                continue

            try:
                roads.append(self._road_from_way(element, tags, nodes))
            except MalformedGeometry as exc:
                dropped += 1
                logger.debug("Dropping road: %s", exc)

        if dropped:
            logger.info("Dropped %d roads without usable geometry", dropped)
        return roads

    def _road_from_way(
        self, element: Mapping[str, Any], tags: Dict[str, str], nodes: NodeLookup
    ) -> RoadSegment:
        geometry = self.resolve_way_geometry(element, nodes)
        if len(geometry) < 2:
            raise MalformedGeometry(
                element.get("id"), f"{len(geometry)} resolvable point(s)"
            )

        name = resolve_name(tags)
        alternate = resolve_name(tags, ALTERNATE_NAME_TAG_PRIORITY)
        if alternate == name:
            alternate = None

        return RoadSegment(
            id=element["id"],
            name=name,
            alternate_name=alternate,
            classification=classify_road(tags),
            geometry=tuple(geometry),
            raw_tags=tags,
        )

    def normalize_places(
        self, payload: Mapping[str, Any], category: str
    ) -> List[PointOfInterest]:
        """Normalize a category query result; every record is filed under ``category``."""
        definition = get_category(category)
        elements = _elements(payload)
        nodes = self.build_node_lookup(elements)
        places: List[PointOfInterest] = []

        for element in elements:
            tags = _string_tags(element)
            if not definition.matches(tags):
                # Bare geometry nodes and unrelated records
                continue

            coordinate = self._place_coordinate(element, nodes)
            if coordinate is None:
                logger.debug(
                    "Dropping place: %s",
                    MalformedGeometry(element.get("id"), "no resolvable coordinate"),
                )
                continue

            places.append(
                PointOfInterest(
                    id=element["id"],
                    name=resolve_name(tags),
                    category=category,
                    coordinate=coordinate,
                    raw_tags=tags,
                )
            )

        return places

    def _place_coordinate(
        self, element: Mapping[str, Any], nodes: NodeLookup
    ) -> Optional[Coordinate]:
        if element.get("type") == "node":
            return _coordinate(element)

        center = _coordinate(element.get("center"))
        if center is not None:
            return center

        geometry = self.resolve_way_geometry(element, nodes)
        if geometry:
            return geometry[0]
        return None
