"""Coordinate helpers for label placement and viewport fitting."""
from typing import Sequence

from streetmap.models.entities import Coordinate
from streetmap.models.layers import Bounds


def midpoint(coordinates: Sequence[Coordinate]) -> Coordinate:
    """The vertex at index len // 2, not an interpolated point."""
    if not coordinates:
        raise ValueError("midpoint of an empty coordinate sequence")
    return coordinates[len(coordinates) // 2]


def bounds_of(coordinates: Sequence[Coordinate]) -> Bounds:
    if not coordinates:
        raise ValueError("bounds of an empty coordinate sequence")
    lats = [lat for lat, _ in coordinates]
    lngs = [lng for _, lng in coordinates]
    return Bounds(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))
