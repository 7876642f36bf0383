"""Popup content for roads and places."""
from streetmap.config.categories import get_category
from streetmap.models.entities import PointOfInterest, RoadSegment
from streetmap.models.layers import Popup


def road_layer_id(road_id: int) -> str:
    return f"road:{road_id}"


def place_layer_id(place_id: int) -> str:
    return f"place:{place_id}"


def road_popup(road: RoadSegment) -> Popup:
    lines = [road.type_label]
    if road.alternate_name and road.alternate_name != road.name:
        lines.append(road.alternate_name)
    return Popup(css_class="street-popup", title=road.display_name, lines=lines)


def place_popup(place: PointOfInterest) -> Popup:
    category = get_category(place.category)
    lines = [f"{category.icon} {category.label}"]
    if place.phone:
        lines.append(f"Phone: {place.phone}")
    if place.street:
        lines.append(place.street)
    if place.opening_hours:
        lines.append(f"Hours: {place.opening_hours}")
    return Popup(css_class="place-popup", title=place.display_name, lines=lines)
