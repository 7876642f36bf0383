import asyncio

import pytest

from conftest import StubSource, no_sleep, node, restaurant_payload, road_payload
from streetmap.models.entities import EntityKind
from streetmap.models.response import LoadState
from streetmap.services.geodata.errors import ServiceUnavailable, UnknownCategory
from streetmap.services.map.recording_surface import RecordingMapSurface
from streetmap.services.pipeline import StreetMapPipeline


class FlakyRoadSource(StubSource):
    """Fails the road dataset a fixed number of times, reporting each retry."""

    def __init__(self, failures, **kwargs):
        super().__init__(roads=road_payload(), **kwargs)
        self.failures = failures

    async def fetch_with_retry(self, query, *, attempts=None, base_delay=None, on_retry=None):
        attempts = attempts or 3
        for attempt in range(1, attempts + 1):
            self.road_calls += 1
            if attempt > self.failures:
                return self.roads
            if attempt < attempts and on_retry is not None:
                on_retry(attempt, ServiceUnavailable([]))
        raise ServiceUnavailable([], attempts=attempts)


@pytest.fixture
def pipeline(stub_source):
    return StreetMapPipeline(
        source=stub_source, surface=RecordingMapSurface(zoom=14), sleep=no_sleep
    )


def test_load_roads_renders_and_reports_counts(pipeline):
    status = asyncio.run(pipeline.load_roads())

    assert status.state == LoadState.READY
    assert status.message == "3 named streets / 4 total roads"
    assert (status.named_count, status.total_count) == (3, 4)
    assert "roads" in pipeline.surface.layers
    assert "labels:major" in pipeline.surface.layers
    assert "labels:minor" not in pipeline.surface.layers


def test_load_roads_reports_terminal_failure():
    source = FlakyRoadSource(failures=3)
    pipeline = StreetMapPipeline(source=source, surface=RecordingMapSurface(), sleep=no_sleep)

    status = asyncio.run(pipeline.load_roads())

    assert status.state == LoadState.FAILED
    assert status.message.startswith("Failed to load street data after 3 attempts")
    assert source.road_calls == 3
    assert pipeline.surface.layers == {}
    # Search still works against the empty dataset
    assert pipeline.search("jid").is_empty


def test_load_roads_tracks_retry_attempt():
    source = FlakyRoadSource(failures=2)
    pipeline = StreetMapPipeline(source=source, surface=RecordingMapSurface(), sleep=no_sleep)

    status = asyncio.run(pipeline.load_roads())

    assert status.state == LoadState.READY
    assert status.attempt == 3


def test_select_category_toggles_markers(pipeline):
    first = asyncio.run(pipeline.select_category("hotels"))

    assert first.active and first.loaded
    assert first.count == 3
    assert pipeline.surface.layers["places"].items[0].fill_color == "#8e24aa"
    assert pipeline.active_category == "hotels"

    second = asyncio.run(pipeline.select_category("hotels"))
    assert not second.active
    assert "places" not in pipeline.surface.layers
    assert pipeline.active_category is None


def test_switching_category_replaces_markers(pipeline):
    asyncio.run(pipeline.select_category("hotels"))
    selection = asyncio.run(pipeline.select_category("restaurants"))

    assert selection.count == 3
    assert {m.place_id for m in pipeline.surface.layers["places"].items} == {600, 601, 602}
    assert pipeline.markers.counts == {"restaurants": 3}


def test_failed_category_degrades_silently(pipeline):
    selection = asyncio.run(pipeline.select_category("banks"))

    assert selection.active and not selection.loaded
    assert not pipeline.category_cache.contains("banks")
    assert "places" not in pipeline.surface.layers


def test_unknown_category_is_rejected(pipeline):
    with pytest.raises(UnknownCategory):
        asyncio.run(pipeline.select_category("museums"))


def test_preload_fills_available_categories(pipeline, stub_source):
    loaded = asyncio.run(pipeline.preload_all())

    assert loaded == {"hotels": True, "restaurants": True, "banks": False, "malls": False}
    summaries = {summary.key: summary for summary in pipeline.category_summaries()}
    assert summaries["hotels"].count == 3
    assert summaries["banks"].loaded is False


def test_search_spans_roads_and_loaded_places(pipeline):
    async def scenario():
        await pipeline.load_roads()
        await pipeline.select_category("restaurants")

    asyncio.run(scenario())
    results = pipeline.search("jid")

    assert [hit.name for hit in results.places] == ["Jidka Cafe"]
    assert [hit.name for hit in results.roads] == ["Jidhka", "Jidka Xorriyada"]
    assert results.places[0].type_label == "restaurant"


def test_focus_through_pipeline(pipeline):
    async def scenario():
        await pipeline.load_roads()
        await pipeline.select_category("hotels")
        road = await pipeline.focus(100)
        place = await pipeline.focus(502, EntityKind.PLACE, category="hotels")
        return road, place

    assert asyncio.run(scenario()) == (True, True)
    assert pipeline.focus_controller.highlighted_id == 100


def test_reload_roads_fetches_again(pipeline, stub_source):
    async def scenario():
        await pipeline.load_roads()
        await pipeline.reload_roads()

    asyncio.run(scenario())
    assert stub_source.road_calls == 2
    assert len(pipeline.surface.layers["roads"].items) == 4


def test_focus_after_reload_highlights_again(pipeline):
    async def scenario():
        await pipeline.load_roads()
        await pipeline.focus(100)
        await pipeline.reload_roads()
        pipeline.surface.drain()
        await pipeline.focus(100)

    asyncio.run(scenario())
    commands = pipeline.surface.drain()

    highlights = [
        command for command in commands
        if command["op"] == "set_style" and command["road_id"] == 100
    ]
    assert len(highlights) == 1
    assert highlights[0]["style"]["color"] == "#ff0000"
    assert pipeline.surface.styles[100].color == "#ff0000"
    assert pipeline.surface.front_road_id == 100


def test_search_lists_places_in_fetch_order():
    hotels = {"elements": [node(700, 9.563, 44.063, tourism="hotel", name="Jidka Hotel")]}
    source = StubSource(
        roads=road_payload(),
        places={"hotels": hotels, "restaurants": restaurant_payload()},
    )
    pipeline = StreetMapPipeline(source=source, surface=RecordingMapSurface(), sleep=no_sleep)

    async def scenario():
        await pipeline.select_category("restaurants")
        await pipeline.select_category("hotels")

    asyncio.run(scenario())
    results = pipeline.search("jidka")

    assert [hit.category for hit in results.places] == ["restaurants", "hotels"]
    # Summaries keep the catalogue order
    assert [summary.key for summary in pipeline.category_summaries()][:2] == ["hotels", "restaurants"]
