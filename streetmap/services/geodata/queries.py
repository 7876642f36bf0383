"""Overpass QL builders for the road dataset and the POI categories."""
from __future__ import annotations

from typing import Tuple

from streetmap.config.categories import CategoryDefinition

BBox = Tuple[float, float, float, float]


def format_bbox(bbox: BBox) -> str:
    """Overpass bbox order is south,west,north,east. Values keep full precision."""
    return ",".join(repr(float(value)) for value in bbox)


def build_road_query(bbox: BBox, timeout_s: int = 60) -> str:
    area = format_bbox(bbox)
    return (
        f"[out:json][timeout:{timeout_s}];("
        f'way["highway"]["name"]({area});'
        f'way["highway"]({area});'
        ");out body;>;out skel qt;"
    )


def build_category_query(
    category: CategoryDefinition, bbox: BBox, timeout_s: int = 15
) -> str:
    area = format_bbox(bbox)
    parts = []
    for rule in category.rules:
        if rule.value is None:
            selector = f'["{rule.key}"]'
        else:
            selector = f'["{rule.key}"="{rule.value}"]'
        parts.append(f"node{selector}({area});")
        parts.append(f"way{selector}({area});")
    return f"[out:json][timeout:{timeout_s}];({''.join(parts)});out center;"

