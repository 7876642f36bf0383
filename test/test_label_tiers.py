import pytest

from streetmap.config.road_types import LabelTier, RoadClass
from streetmap.models.entities import RoadSegment
from streetmap.services.map.label_tiers import LabelTierManager, tier_layer_name
from streetmap.services.map.recording_surface import RecordingMapSurface

THRESHOLDS = {LabelTier.MAJOR: 12, LabelTier.SECONDARY: 15, LabelTier.MINOR: 16}


def _road(road_id, name, classification, points=3):
    geometry = tuple((9.5 + i * 0.001 + road_id * 0.01, 44.0 + i * 0.001) for i in range(points))
    return RoadSegment(id=road_id, name=name, classification=classification, geometry=geometry)


@pytest.fixture
def roads():
    return [
        _road(1, "Jidka Xorriyada", RoadClass.PRIMARY, points=5),
        _road(2, "Jidka Xorriyada", RoadClass.PRIMARY),
        _road(3, "Jidka Xorriyada", RoadClass.RESIDENTIAL),
        _road(4, "Road 26 June", RoadClass.TERTIARY),
        _road(5, "Road 26 June", RoadClass.SECONDARY, points=2),
        _road(6, None, RoadClass.SERVICE),
        _road(7, "Waddada Hodan", RoadClass.RESIDENTIAL, points=4),
    ]


@pytest.fixture
def manager():
    return LabelTierManager(THRESHOLDS, opacity=0.7)


def test_one_label_per_name_per_tier(manager, roads):
    render = manager.render(roads)

    major = [label.text for label in render.labels(LabelTier.MAJOR)]
    secondary = [label.text for label in render.labels(LabelTier.SECONDARY)]
    minor = [label.text for label in render.labels(LabelTier.MINOR)]

    assert major == ["Jidka Xorriyada"]
    assert secondary == ["Road 26 June"]
    # Same name in another tier gets its own label
    assert minor == ["Jidka Xorriyada", "Waddada Hodan"]


def test_label_sits_at_midpoint_of_first_segment(manager, roads):
    render = manager.render(roads)

    (major,) = render.labels(LabelTier.MAJOR)
    assert major.position == roads[0].geometry[2]
    (secondary,) = render.labels(LabelTier.SECONDARY)
    assert secondary.position == roads[3].geometry[1]
    assert major.css_class == "street-label-primary"


def test_every_road_is_drawn_and_counted(manager, roads):
    render = manager.render(roads)

    assert [line.road_id for line in render.roads_layer.items] == [1, 2, 3, 4, 5, 6, 7]
    assert render.named_count == 6
    assert render.total_count == 7
    assert render.status_text == "6 named streets / 7 total roads"
    unnamed = render.roads_layer.items[5]
    assert unnamed.style.color == "#c0c4c8"
    assert unnamed.popup.title == "Unnamed Road"


def test_registry_is_rebuilt_per_render(manager, roads):
    first = manager.render(roads)
    second = manager.render(roads[:1])

    assert first.label_registry[LabelTier.MAJOR] == {"Jidka Xorriyada"}
    assert second.label_registry[LabelTier.MINOR] == set()


@pytest.mark.parametrize(
    "zoom, expected",
    [
        (12, {LabelTier.MAJOR}),
        (14, {LabelTier.MAJOR}),
        (15, {LabelTier.MAJOR, LabelTier.SECONDARY}),
        (16, {LabelTier.MAJOR, LabelTier.SECONDARY, LabelTier.MINOR}),
        (19, {LabelTier.MAJOR, LabelTier.SECONDARY, LabelTier.MINOR}),
    ],
)
def test_tiers_attach_by_zoom(manager, roads, zoom, expected):
    surface = RecordingMapSurface(zoom=zoom)
    manager.attach(surface, roads)

    attached = {tier for tier in LabelTier if tier_layer_name(tier) in surface.layers}
    assert attached == expected
    assert "roads" in surface.layers


def test_zoom_changes_toggle_tiers_without_rebuilding(manager, roads):
    surface = RecordingMapSurface(zoom=16)
    render = manager.attach(surface, roads)
    minor_layer = render.tier_layers[LabelTier.MINOR]
    surface.drain()

    surface.set_zoom(14)
    removed = [cmd["name"] for cmd in surface.drain() if cmd["op"] == "remove_layer"]
    assert sorted(removed) == ["labels:minor", "labels:secondary"]

    surface.set_zoom(16)
    assert surface.layers["labels:minor"] is minor_layer
    assert manager.current is render


def test_reattach_replaces_previous_layers(manager, roads):
    surface = RecordingMapSurface(zoom=16)
    manager.attach(surface, roads)
    render = manager.attach(surface, roads[:2])

    assert surface.layers["roads"] is render.roads_layer
    assert len(surface.layers["roads"].items) == 2
    assert surface.layers["labels:minor"].items == []
