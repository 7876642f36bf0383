"""
Road Classification Configuration
Road classes read from the ``highway`` tag, their line styles and label tiers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping


class RoadClass(str, Enum):
    MOTORWAY = "motorway"
    TRUNK = "trunk"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
    RESIDENTIAL = "residential"
    LIVING_STREET = "living_street"
    UNCLASSIFIED = "unclassified"
    SERVICE = "service"
    TRACK = "track"
    PATH = "path"
    DEFAULT = "default"


class LabelTier(str, Enum):
    MAJOR = "major"
    SECONDARY = "secondary"
    MINOR = "minor"


@dataclass(frozen=True)
class RoadStyle:
    color: str
    weight: int
    label_class: str


ROAD_CLASS_TAG = "highway"

_PRIMARY_LABEL = "street-label-primary"
_SECONDARY_LABEL = "street-label-secondary"
_MINOR_LABEL = "street-label"

ROAD_STYLES: Dict[RoadClass, RoadStyle] = {
    RoadClass.MOTORWAY: RoadStyle("#d4503a", 5, _PRIMARY_LABEL),
    RoadClass.TRUNK: RoadStyle("#d4503a", 5, _PRIMARY_LABEL),
    RoadClass.PRIMARY: RoadStyle("#d4503a", 4, _PRIMARY_LABEL),
    RoadClass.SECONDARY: RoadStyle("#e8a44a", 3, _SECONDARY_LABEL),
    RoadClass.TERTIARY: RoadStyle("#6a9fd8", 3, _SECONDARY_LABEL),
    RoadClass.RESIDENTIAL: RoadStyle("#9ca8b8", 2, _MINOR_LABEL),
    RoadClass.LIVING_STREET: RoadStyle("#9ca8b8", 2, _MINOR_LABEL),
    RoadClass.UNCLASSIFIED: RoadStyle("#b0a8c0", 2, _MINOR_LABEL),
    RoadClass.SERVICE: RoadStyle("#c0c4c8", 1, _MINOR_LABEL),
    RoadClass.TRACK: RoadStyle("#c0c4c8", 1, _MINOR_LABEL),
    RoadClass.PATH: RoadStyle("#d0d4d8", 1, _MINOR_LABEL),
    RoadClass.DEFAULT: RoadStyle("#b0a8c0", 2, _MINOR_LABEL),
}

TIER_BY_CLASS: Dict[RoadClass, LabelTier] = {
    RoadClass.MOTORWAY: LabelTier.MAJOR,
    RoadClass.TRUNK: LabelTier.MAJOR,
    RoadClass.PRIMARY: LabelTier.MAJOR,
    RoadClass.SECONDARY: LabelTier.SECONDARY,
    RoadClass.TERTIARY: LabelTier.SECONDARY,
}


def classify_road(tags: Mapping[str, str]) -> RoadClass:
    """Map the highway tag to a RoadClass; unknown values fall back to DEFAULT."""
    value = tags.get(ROAD_CLASS_TAG, "")
    try:
        return RoadClass(value)
    except ValueError:
        return RoadClass.DEFAULT


def get_road_style(road_class: RoadClass) -> RoadStyle:
    return ROAD_STYLES.get(road_class, ROAD_STYLES[RoadClass.DEFAULT])


def get_label_tier(road_class: RoadClass) -> LabelTier:
    return TIER_BY_CLASS.get(road_class, LabelTier.MINOR)
