from abc import ABC, abstractmethod
from typing import Callable, Tuple

from streetmap.models.entities import Coordinate
from streetmap.models.layers import Bounds, LayerGroup, PathStyle

ZoomListener = Callable[[int], None]


class MapSurface(ABC):
    """Map widget abstract interface"""

    @abstractmethod
    def add_layer(self, layer: LayerGroup) -> None:
        pass

    @abstractmethod
    def remove_layer(self, layer: LayerGroup) -> None:
        pass

    @abstractmethod
    def has_layer(self, layer: LayerGroup) -> bool:
        pass

    @abstractmethod
    def fit_bounds(
        self, bounds: Bounds, *, padding: Tuple[int, int], max_zoom: int
    ) -> None:
        """Navigate so the bounds fill the viewport, never zooming past max_zoom"""
        pass

    @abstractmethod
    def fly_to(self, coordinate: Coordinate, zoom: int, *, duration: float) -> None:
        pass

    @abstractmethod
    def get_zoom(self) -> int:
        pass

    @abstractmethod
    def on_zoom_changed(self, listener: ZoomListener) -> None:
        """Register a listener called with the new zoom after every zoom change"""
        pass

    @abstractmethod
    def set_path_style(self, road_id: int, style: PathStyle) -> None:
        pass

    @abstractmethod
    def bring_to_front(self, road_id: int) -> None:
        pass

    @abstractmethod
    def open_popup(self, layer_id: str) -> None:
        """Open the popup of a drawn item, e.g. ``road:42`` or ``place:7``"""
        pass
