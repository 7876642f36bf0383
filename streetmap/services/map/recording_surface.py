"""
Server-side map surface
Keeps the layer/style state the browser should be showing and queues the
commands needed to get it there.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from streetmap.config import settings
from streetmap.models.entities import Coordinate
from streetmap.models.layers import Bounds, LayerGroup, PathStyle, Polyline
from streetmap.services.map.map_surface import MapSurface, ZoomListener

logger = logging.getLogger(__name__)


class RecordingMapSurface(MapSurface):
    """MapSurface that records state and queues commands for the browser"""

    def __init__(self, zoom: Optional[int] = None):
        self.zoom = zoom if zoom is not None else settings.map_default_zoom
        self.layers: Dict[str, LayerGroup] = {}
        self.styles: Dict[int, PathStyle] = {}
        self.front_road_id: Optional[int] = None
        self.commands: List[Dict[str, Any]] = []
        self._listeners: List[ZoomListener] = []

    def _emit(self, op: str, **fields: Any) -> None:
        self.commands.append({"op": op, **fields})

    def drain(self) -> List[Dict[str, Any]]:
        """Return and clear queued commands"""
        commands, self.commands = self.commands, []
        return commands

    def add_layer(self, layer: LayerGroup) -> None:
        if layer.name in self.layers:
            return
        self.layers[layer.name] = layer
        # Fresh polylines start in the style they were drawn with
        for item in layer.items:
            if isinstance(item, Polyline):
                self.styles[item.road_id] = item.style
        self._emit("add_layer", layer=layer.model_dump(mode="json"))

    def remove_layer(self, layer: LayerGroup) -> None:
        removed = self.layers.pop(layer.name, None)
        if removed is None:
            return
        for item in removed.items:
            if isinstance(item, Polyline):
                self.styles.pop(item.road_id, None)
                if self.front_road_id == item.road_id:
                    self.front_road_id = None
        self._emit("remove_layer", name=layer.name)

    def has_layer(self, layer: LayerGroup) -> bool:
        return layer.name in self.layers

    def fit_bounds(
        self, bounds: Bounds, *, padding: Tuple[int, int], max_zoom: int
    ) -> None:
        self._emit(
            "fit_bounds",
            bounds=bounds.model_dump(),
            padding=list(padding),
            max_zoom=max_zoom,
        )

    def fly_to(self, coordinate: Coordinate, zoom: int, *, duration: float) -> None:
        self._emit("fly_to", center=list(coordinate), zoom=zoom, duration=duration)

    def get_zoom(self) -> int:
        return self.zoom

    def on_zoom_changed(self, listener: ZoomListener) -> None:
        self._listeners.append(listener)

    def set_zoom(self, zoom: int) -> None:
        """Report a zoom change from the browser and notify listeners"""
        clamped = max(settings.map_min_zoom, min(settings.map_max_zoom, int(zoom)))
        self.zoom = clamped
        for listener in list(self._listeners):
            listener(clamped)

    def set_path_style(self, road_id: int, style: PathStyle) -> None:
        if self.styles.get(road_id) == style:
            return
        self.styles[road_id] = style
        self._emit("set_style", road_id=road_id, style=style.model_dump())

    def bring_to_front(self, road_id: int) -> None:
        self.front_road_id = road_id
        self._emit("bring_to_front", road_id=road_id)

    def open_popup(self, layer_id: str) -> None:
        self._emit("open_popup", id=layer_id)
