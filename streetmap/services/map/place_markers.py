"""Circle markers for the currently displayed POI category."""
import logging
from typing import Dict, List, Optional, Sequence

from streetmap.config.categories import get_category
from streetmap.models.entities import PointOfInterest
from streetmap.models.layers import CircleMarker, LayerGroup
from streetmap.services.map.map_surface import MapSurface
from streetmap.services.map.popups import place_popup

logger = logging.getLogger(__name__)

MARKERS_LAYER = "places"


class PlaceMarkerLayer:
    """One marker layer on the surface, replaced wholesale per category"""

    def __init__(self, surface: MapSurface):
        self.surface = surface
        self.layer: Optional[LayerGroup] = None
        self.category: Optional[str] = None
        # Count badge per displayed category
        self.counts: Dict[str, int] = {}

    def build_markers(
        self, places: Sequence[PointOfInterest], category: str
    ) -> List[CircleMarker]:
        definition = get_category(category)
        return [
            CircleMarker(
                place_id=place.id,
                position=place.coordinate,
                fill_color=definition.color,
                popup=place_popup(place),
            )
            for place in places
        ]

    def display(
        self, places: Sequence[PointOfInterest], category: str
    ) -> List[CircleMarker]:
        self.clear()
        markers = self.build_markers(places, category)
        self.layer = LayerGroup(name=MARKERS_LAYER, items=markers)
        self.category = category
        self.counts = {category: len(markers)}
        self.surface.add_layer(self.layer)
        logger.debug("Displaying %d %s markers", len(markers), category)
        return markers

    def clear(self) -> None:
        if self.layer is not None:
            self.surface.remove_layer(self.layer)
        self.layer = None
        self.category = None
        self.counts = {}
