"""
Street map pipeline - owns every cache and controller for one map instance
Fetch → normalize → cache → (labels, search) → focus
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from streetmap.config import settings
from streetmap.config.categories import CATEGORY_DEFINITIONS, get_category
from streetmap.models.entities import EntityKind
from streetmap.models.response import (
    CategorySelection,
    CategorySummary,
    LoadState,
    LoadStatus,
    SearchResults,
)
from streetmap.services.cache.category_cache import CategoryCache
from streetmap.services.cache.road_cache import RoadCache
from streetmap.services.geodata.errors import GeodataError, ServiceUnavailable
from streetmap.services.geodata.normalizer import GeodataNormalizer
from streetmap.services.geodata.overpass_client import OverpassClient
from streetmap.services.geodata.source import GeodataSource
from streetmap.services.map.focus_controller import FocusController
from streetmap.services.map.label_tiers import LabelTierManager, RoadRender
from streetmap.services.map.map_surface import MapSurface
from streetmap.services.map.place_markers import PlaceMarkerLayer
from streetmap.services.map.recording_surface import RecordingMapSurface
from streetmap.services.preloader import CategoryPreloader
from streetmap.services.search.debouncer import ResultCallback, SearchDebouncer
from streetmap.services.search.search_index import SearchIndex

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class StreetMapPipeline:
    """
    Context object for one map: caches, label tiers, search and focus.

    Architecture: Overpass fetch → normalization → category/road caches →
    label tiers and search index → focus controller
    """

    def __init__(
        self,
        *,
        source: Optional[GeodataSource] = None,
        surface: Optional[MapSurface] = None,
        normalizer: Optional[GeodataNormalizer] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.source = source or OverpassClient(sleep=sleep)
        self.surface = surface or RecordingMapSurface()
        self.normalizer = normalizer or GeodataNormalizer()

        self.road_cache = RoadCache(self.source, self.normalizer)
        self.category_cache = CategoryCache(self.source, self.normalizer)
        self.tier_manager = LabelTierManager()
        self.markers = PlaceMarkerLayer(self.surface)
        self.search_index = SearchIndex(self.road_cache, self.category_cache)
        self.focus_controller = FocusController(
            self.surface,
            self.road_cache,
            self.category_cache,
            self.tier_manager,
            sleep=sleep,
        )
        self.preloader = CategoryPreloader(self.category_cache, sleep=sleep)

        self.active_category: Optional[str] = None
        self.status = LoadStatus()
        self.render: Optional[RoadRender] = None

    async def load_roads(self) -> LoadStatus:
        """Load, render and attach the road dataset; failures end up in ``status``"""
        attempts = settings.road_fetch_attempts
        self.status = LoadStatus(
            state=LoadState.LOADING, message="Loading street data...", attempt=1
        )

        def on_retry(attempt: int, error: ServiceUnavailable) -> None:
            self.status = LoadStatus(
                state=LoadState.LOADING,
                message=f"Retrying street data (attempt {attempt + 1}/{attempts})...",
                attempt=attempt + 1,
            )

        try:
            roads = await self.road_cache.get_or_fetch(on_retry=on_retry)
        except GeodataError as exc:
            logger.error("Failed to load street data: %s", exc)
            self.status = LoadStatus(
                state=LoadState.FAILED,
                message=(
                    f"Failed to load street data after {attempts} attempts. "
                    "Please refresh the page."
                ),
                attempt=getattr(exc, "attempts", attempts),
            )
            return self.status

        self.render = self.tier_manager.attach(self.surface, roads)
        self.status = LoadStatus(
            state=LoadState.READY,
            message=self.render.status_text,
            attempt=self.status.attempt,
            named_count=self.render.named_count,
            total_count=self.render.total_count,
        )
        return self.status

    async def reload_roads(self) -> LoadStatus:
        self.focus_controller.highlighted_id = None
        self.road_cache.invalidate()
        return await self.load_roads()

    async def select_category(self, category: str) -> CategorySelection:
        """Toggle a category: re-selecting the active one clears its markers.

        Raises:
            UnknownCategory: category is not in the catalogue
        """
        get_category(category)

        if self.active_category == category:
            self.markers.clear()
            self.active_category = None
            return CategorySelection(
                category=category,
                active=False,
                loaded=self.category_cache.contains(category),
            )

        self.active_category = category
        try:
            places = await self.category_cache.get_or_fetch(category)
        except GeodataError as exc:
            logger.warning("Failed to load %s: %s", category, exc)
            if self.active_category == category:
                self.markers.clear()
            return CategorySelection(category=category, active=True, loaded=False)

        if self.active_category != category:
            # Another category was selected while this one loaded
            return CategorySelection(
                category=category, active=False, loaded=True, count=len(places)
            )

        markers = self.markers.display(places, category)
        return CategorySelection(
            category=category,
            active=True,
            loaded=True,
            markers=markers,
            count=len(markers),
        )

    def search(self, query: str) -> SearchResults:
        return self.search_index.search(query)

    def debouncer(self, on_results: ResultCallback) -> SearchDebouncer:
        return SearchDebouncer(self.search, on_results)

    async def focus(
        self,
        entity_id: int,
        kind: EntityKind = EntityKind.ROAD,
        *,
        category: Optional[str] = None,
    ) -> bool:
        return await self.focus_controller.focus(entity_id, kind, category=category)

    async def preload_all(self) -> Dict[str, bool]:
        return await self.preloader.preload()

    def category_summaries(self) -> List[CategorySummary]:
        summaries = []
        for definition in CATEGORY_DEFINITIONS:
            places = self.category_cache.get(definition.key)
            summaries.append(
                CategorySummary(
                    key=definition.key,
                    label=definition.label,
                    color=definition.color,
                    icon=definition.icon,
                    loaded=places is not None,
                    count=len(places) if places is not None else None,
                    active=self.active_category == definition.key,
                )
            )
        return summaries

    async def aclose(self) -> None:
        close = getattr(self.source, "aclose", None)
        if close is not None:
            await close()
