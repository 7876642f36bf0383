"""
Map layer models
Plain descriptions of what the browser map widget should draw.
"""
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel

from streetmap.models.entities import Coordinate


class PathStyle(BaseModel):
    """Polyline style"""
    color: str
    weight: int
    opacity: float


class Popup(BaseModel):
    """Popup content as title plus detail lines"""
    css_class: str
    title: str
    lines: List[str] = []


class Polyline(BaseModel):
    road_id: int
    coordinates: List[Coordinate]
    style: PathStyle
    popup: Optional[Popup] = None


class Label(BaseModel):
    """Non-interactive text marker"""
    text: str
    position: Coordinate
    css_class: str


class CircleMarker(BaseModel):
    place_id: int
    position: Coordinate
    radius: int = 8
    fill_color: str
    stroke_color: str = "#fff"
    weight: int = 2
    fill_opacity: float = 0.9
    popup: Optional[Popup] = None


LayerItem = Union[Polyline, Label, CircleMarker]


class LayerGroup(BaseModel):
    """Named group of items attached to or detached from the map as a whole"""
    name: str
    items: List[LayerItem] = []


class Bounds(BaseModel):
    south: float
    west: float
    north: float
    east: float

    def as_corners(self) -> Tuple[Coordinate, Coordinate]:
        return (self.south, self.west), (self.north, self.east)
