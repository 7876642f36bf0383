# Map presentation package
from .focus_controller import FocusController
from .label_tiers import LabelTierManager
from .map_surface import MapSurface
from .place_markers import PlaceMarkerLayer
from .recording_surface import RecordingMapSurface

__all__ = [
    "FocusController",
    "LabelTierManager",
    "MapSurface",
    "PlaceMarkerLayer",
    "RecordingMapSurface",
]
