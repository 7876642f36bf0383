import asyncio

import pytest

from conftest import no_sleep
from streetmap.config import settings
from streetmap.models.entities import EntityKind
from streetmap.services.cache.category_cache import CategoryCache
from streetmap.services.cache.road_cache import RoadCache
from streetmap.services.map.focus_controller import FocusController
from streetmap.services.map.label_tiers import LabelTierManager
from streetmap.services.map.recording_surface import RecordingMapSurface


@pytest.fixture
def setup(stub_source):
    surface = RecordingMapSurface(zoom=14)
    road_cache = RoadCache(stub_source)
    category_cache = CategoryCache(stub_source)
    tiers = LabelTierManager()

    async def load():
        roads = await road_cache.get_or_fetch()
        await category_cache.get_or_fetch("hotels")
        tiers.attach(surface, roads)

    asyncio.run(load())
    surface.drain()
    controller = FocusController(surface, road_cache, category_cache, tiers, sleep=no_sleep)
    return controller, surface


def _ops(commands):
    return [command["op"] for command in commands]


def test_focus_road_highlights_and_fits_viewport(setup):
    controller, surface = setup

    assert asyncio.run(controller.focus(102)) is True

    style = surface.styles[102]
    assert (style.color, style.weight, style.opacity) == ("#ff0000", 6, 1.0)
    assert surface.front_road_id == 102

    commands = surface.drain()
    fit = next(command for command in commands if command["op"] == "fit_bounds")
    assert fit["bounds"] == {"south": 9.550, "west": 44.050, "north": 9.553, "east": 44.053}
    assert fit["padding"] == [50, 50]
    assert fit["max_zoom"] == 17
    assert commands[-1] == {"op": "open_popup", "id": "road:102"}


def test_only_one_road_is_highlighted(setup):
    controller, surface = setup

    asyncio.run(controller.focus(100))
    asyncio.run(controller.focus(103))

    highlighted = [
        road_id for road_id, style in surface.styles.items() if style.color == settings.highlight_color
    ]
    assert highlighted == [103]
    assert surface.styles[100].color == "#d4503a"
    assert surface.styles[100].opacity == 0.7
    assert controller.highlighted_id == 103


def test_focus_is_idempotent(setup):
    controller, surface = setup

    asyncio.run(controller.focus(101))
    once = dict(surface.styles)
    asyncio.run(controller.focus(101))

    assert surface.styles == once
    assert surface.front_road_id == 101


def test_unknown_road_is_ignored(setup):
    controller, surface = setup
    assert asyncio.run(controller.focus(424242)) is False
    assert surface.drain() == []


def test_focus_place_flies_then_opens_popup(setup):
    controller, surface = setup
    delays = []

    async def sleep(delay):
        delays.append(delay)
        assert _ops(surface.commands) == ["fly_to"]

    controller._sleep = sleep
    assert asyncio.run(controller.focus(500, EntityKind.PLACE)) is True

    fly, popup = surface.drain()
    assert fly == {"op": "fly_to", "center": [9.561, 44.065], "zoom": 18, "duration": 0.8}
    assert popup == {"op": "open_popup", "id": "place:500"}
    assert delays == [0.85]


def test_place_not_in_cache_is_ignored(setup):
    controller, _ = setup
    assert asyncio.run(controller.focus(600, EntityKind.PLACE)) is False


def test_clear_highlight_restores_default_styles(setup):
    controller, surface = setup
    asyncio.run(controller.focus(100))
    controller.clear_highlight()

    assert surface.styles[100].color == "#d4503a"
    assert controller.highlighted_id is None

