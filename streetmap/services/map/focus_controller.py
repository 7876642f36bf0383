import asyncio
import logging
from typing import Awaitable, Callable, Optional

from streetmap.config import settings
from streetmap.models.entities import EntityKind, PointOfInterest, RoadSegment
from streetmap.models.layers import PathStyle
from streetmap.services.cache.category_cache import CategoryCache
from streetmap.services.cache.road_cache import RoadCache
from streetmap.services.map.geometry import bounds_of
from streetmap.services.map.label_tiers import LabelTierManager
from streetmap.services.map.map_surface import MapSurface
from streetmap.services.map.popups import place_layer_id, road_layer_id

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class FocusController:
    """
    Highlight a selected road or fly to a selected place.
    At most one road carries the highlight style at any time.
    """

    def __init__(
        self,
        surface: MapSurface,
        road_cache: RoadCache,
        category_cache: CategoryCache,
        tier_manager: Optional[LabelTierManager] = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ):
        self.surface = surface
        self.road_cache = road_cache
        self.category_cache = category_cache
        self.tier_manager = tier_manager or LabelTierManager()
        self.highlighted_id: Optional[int] = None
        self._sleep = sleep

    @property
    def highlight_style(self) -> PathStyle:
        return PathStyle(
            color=settings.highlight_color,
            weight=settings.highlight_weight,
            opacity=settings.highlight_opacity,
        )

    async def focus(
        self,
        entity_id: int,
        kind: EntityKind = EntityKind.ROAD,
        *,
        category: Optional[str] = None,
    ) -> bool:
        """Focus an entity; returns False when it is not in any cache"""
        if kind == EntityKind.ROAD:
            return self.focus_road(entity_id)
        return await self.focus_place(entity_id, category=category)

    def focus_road(self, road_id: int) -> bool:
        road = self.road_cache.find(road_id)
        if road is None:
            logger.debug("Road %s not loaded, nothing to focus", road_id)
            return False

        self._reset_roads(except_id=road_id)
        self.surface.set_path_style(road_id, self.highlight_style)
        self.surface.bring_to_front(road_id)
        self.highlighted_id = road_id

        self.surface.fit_bounds(
            bounds_of(road.geometry),
            padding=settings.focus_padding,
            max_zoom=settings.focus_max_zoom,
        )
        self.surface.open_popup(road_layer_id(road_id))
        return True

    def clear_highlight(self) -> None:
        self._reset_roads()
        self.highlighted_id = None

    def _reset_roads(self, except_id: Optional[int] = None) -> None:
        for road in self.road_cache.roads:
            if road.id != except_id:
                self.surface.set_path_style(road.id, self._default_style(road))

    def _default_style(self, road: RoadSegment) -> PathStyle:
        return self.tier_manager.default_style(road)

    async def focus_place(self, place_id: int, *, category: Optional[str] = None) -> bool:
        place = self.category_cache.find(place_id, category)
        if place is None:
            logger.debug("Place %s not loaded, nothing to focus", place_id)
            return False
        await self._fly_to_place(place)
        return True

    async def _fly_to_place(self, place: PointOfInterest) -> None:
        self.surface.fly_to(
            place.coordinate,
            settings.place_focus_zoom,
            duration=settings.place_fly_duration_s,
        )
        # Open the popup once the fly animation has settled
        await self._sleep(settings.popup_settle_delay_s)
        self.surface.open_popup(place_layer_id(place.id))
