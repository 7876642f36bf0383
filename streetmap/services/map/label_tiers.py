"""
Zoom-tiered street labels
Every road is drawn; each named road is labelled at most once per tier, and
whole tiers are attached or detached as the zoom crosses their thresholds.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from streetmap.config import settings
from streetmap.config.road_types import LabelTier, get_label_tier, get_road_style
from streetmap.models.entities import RoadSegment
from streetmap.models.layers import Label, LayerGroup, PathStyle, Polyline
from streetmap.services.map.geometry import midpoint
from streetmap.services.map.map_surface import MapSurface
from streetmap.services.map.popups import road_popup

logger = logging.getLogger(__name__)

ROADS_LAYER = "roads"


def tier_layer_name(tier: LabelTier) -> str:
    return f"labels:{tier.value}"


@dataclass
class RoadRender:
    """Output of one render pass over the road dataset"""

    roads_layer: LayerGroup
    tier_layers: Dict[LabelTier, LayerGroup]
    # Names already labelled, per tier; scoped to this pass
    label_registry: Dict[LabelTier, Set[str]] = field(default_factory=dict)
    named_count: int = 0
    total_count: int = 0

    @property
    def status_text(self) -> str:
        return f"{self.named_count} named streets / {self.total_count} total roads"

    def labels(self, tier: LabelTier) -> List[Label]:
        return list(self.tier_layers[tier].items)


class LabelTierManager:
    """Assign road labels to tiers and toggle the tiers by zoom level"""

    def __init__(
        self,
        thresholds: Optional[Dict[LabelTier, int]] = None,
        *,
        opacity: Optional[float] = None,
    ):
        self.thresholds = thresholds or {
            LabelTier.MAJOR: settings.major_label_zoom,
            LabelTier.SECONDARY: settings.secondary_label_min_zoom,
            LabelTier.MINOR: settings.minor_label_min_zoom,
        }
        self.opacity = opacity if opacity is not None else settings.road_opacity
        self.current: Optional[RoadRender] = None
        self._surface: Optional[MapSurface] = None
        self._subscribed: Set[int] = set()

    def default_style(self, road: RoadSegment) -> PathStyle:
        style = get_road_style(road.classification)
        return PathStyle(color=style.color, weight=style.weight, opacity=self.opacity)

    def render(self, roads: Sequence[RoadSegment]) -> RoadRender:
        """Build polylines and de-duplicated tier labels for the roads"""
        polylines: List[Polyline] = []
        tier_labels: Dict[LabelTier, List[Label]] = {tier: [] for tier in LabelTier}
        registry: Dict[LabelTier, Set[str]] = {tier: set() for tier in LabelTier}
        named_count = 0

        for road in roads:
            polylines.append(
                Polyline(
                    road_id=road.id,
                    coordinates=list(road.geometry),
                    style=self.default_style(road),
                    popup=road_popup(road),
                )
            )

            if not road.name:
                continue
            named_count += 1

            tier = get_label_tier(road.classification)
            if road.name in registry[tier]:
                continue
            registry[tier].add(road.name)
            tier_labels[tier].append(
                Label(
                    text=road.name,
                    position=midpoint(road.geometry),
                    css_class=get_road_style(road.classification).label_class,
                )
            )

        render = RoadRender(
            roads_layer=LayerGroup(name=ROADS_LAYER, items=polylines),
            tier_layers={
                tier: LayerGroup(name=tier_layer_name(tier), items=labels)
                for tier, labels in tier_labels.items()
            },
            label_registry=registry,
            named_count=named_count,
            total_count=len(polylines),
        )
        logger.info(
            "Rendered %s (%s labels)",
            render.status_text,
            ", ".join(f"{tier.value}={len(tier_labels[tier])}" for tier in LabelTier),
        )
        return render

    def attach(self, surface: MapSurface, roads: Sequence[RoadSegment]) -> RoadRender:
        """Render the roads onto the surface, replacing any previous pass"""
        self.detach()
        render = self.render(roads)
        self.current = render
        self._surface = surface

        surface.add_layer(render.roads_layer)
        if id(surface) not in self._subscribed:
            surface.on_zoom_changed(self.update_visibility)
            self._subscribed.add(id(surface))
        self.update_visibility(surface.get_zoom())
        return render

    def detach(self) -> None:
        if self.current is None or self._surface is None:
            return
        for layer in self.current.tier_layers.values():
            if self._surface.has_layer(layer):
                self._surface.remove_layer(layer)
        self._surface.remove_layer(self.current.roads_layer)
        self.current = None

    def visible_tiers(self, zoom: int) -> List[LabelTier]:
        return [tier for tier in LabelTier if zoom >= self.thresholds[tier]]

    def update_visibility(self, zoom: int) -> None:
        """Attach tiers at or above their threshold and detach the rest"""
        if self.current is None or self._surface is None:
            return
        visible = set(self.visible_tiers(zoom))
        for tier, layer in self.current.tier_layers.items():
            attached = self._surface.has_layer(layer)
            if tier in visible and not attached:
                self._surface.add_layer(layer)
            elif tier not in visible and attached:
                self._surface.remove_layer(layer)
