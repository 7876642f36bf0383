"""
Normalized geodata entities
Roads and points of interest as produced by the normalizer; immutable once built.
"""
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from streetmap.config.categories import get_category, is_valid_category
from streetmap.config.road_types import ROAD_CLASS_TAG, RoadClass

Coordinate = Tuple[float, float]


class EntityKind(str, Enum):
    ROAD = "road"
    PLACE = "place"


class RoadSegment(BaseModel):
    """A highway way with its resolved coordinate sequence"""

    model_config = ConfigDict(frozen=True)

    id: int
    name: Optional[str] = None
    alternate_name: Optional[str] = None
    classification: RoadClass = RoadClass.DEFAULT
    geometry: Tuple[Coordinate, ...]
    raw_tags: Dict[str, str] = {}

    @field_validator("geometry")
    @classmethod
    def _at_least_two_points(cls, value: Tuple[Coordinate, ...]) -> Tuple[Coordinate, ...]:
        if len(value) < 2:
            raise ValueError("a road segment needs at least 2 coordinates")
        return value

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed Road"

    @property
    def type_label(self) -> str:
        raw_type = self.raw_tags.get(ROAD_CLASS_TAG) or self.classification.value
        return raw_type.replace("_", " ")


class PointOfInterest(BaseModel):
    """A place filed under exactly one catalogue category"""

    model_config = ConfigDict(frozen=True)

    id: int
    name: Optional[str] = None
    category: str
    coordinate: Coordinate
    raw_tags: Dict[str, str] = {}

    @field_validator("category")
    @classmethod
    def _known_category(cls, value: str) -> str:
        if not is_valid_category(value):
            raise ValueError(f"unknown category: {value}")
        return value

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"Unnamed {get_category(self.category).singular}"

    @property
    def phone(self) -> Optional[str]:
        return self.raw_tags.get("phone") or self.raw_tags.get("contact:phone")

    @property
    def street(self) -> Optional[str]:
        return self.raw_tags.get("addr:street")

    @property
    def opening_hours(self) -> Optional[str]:
        return self.raw_tags.get("opening_hours")

    @property
    def subtype(self) -> Optional[str]:
        """Human label of the first category rule the tags satisfy, e.g. 'guest house'."""
        rule = get_category(self.category).matching_rule(self.raw_tags)
        if rule is None:
            return None
        return (rule.value or rule.key).replace("_", " ")
