"""Tests for hover, tooltip and zoom routing."""

import pytest

from zipmap.interaction import (
    InteractionDispatcher,
    format_population,
    hit_test,
    tooltip_text,
)
from zipmap.models import MarkerAttributes, ZoomDelta
from zipmap.state import ViewStateController


class RecordingCanvas:
    def __init__(self):
        self.calls = []

    def add_marker(self, key, target, duration_ms):
        self.calls.append(("add", key))

    def update_marker(self, key, target, duration_ms):
        self.calls.append(("update", key))

    def remove_marker(self, key, duration_ms):
        self.calls.append(("remove", key))

    def set_highlight(self, key):
        self.calls.append(("highlight", key))

    def show_tooltip(self, text, x, y):
        self.calls.append(("tooltip", text, x, y))

    def hide_tooltip(self):
        self.calls.append(("hide_tooltip",))

    def flush(self):
        self.calls.append(("flush",))


@pytest.mark.parametrize(
    "population, expected",
    [
        (0, "0"),
        (999, "999"),
        (1000, "1 000"),
        (9991, "9 991"),
        (475503, "475 503"),
        (1200000, "1 200 000"),
        (12345678, "12 345 678"),
    ],
)
def test_format_population_groups_by_three(population, expected):
    assert format_population(population) == expected


def test_format_population_custom_separator():
    assert format_population(1200000, ".") == "1.200.000"


def test_tooltip_text(cities):
    bratislava = cities[0]
    assert tooltip_text(bratislava, show_population=False) == "81101 Bratislava"
    assert tooltip_text(bratislava, show_population=True) == "81101 Bratislava\n475 503"


def test_hit_test_prefers_smallest_marker():
    markers = {
        "big": MarkerAttributes(x=100.0, y=100.0, radius=20.0, fill="red"),
        "small": MarkerAttributes(x=105.0, y=100.0, radius=5.0, fill="red"),
    }
    assert hit_test(markers, 104.0, 100.0) == "small"
    assert hit_test(markers, 90.0, 100.0) == "big"
    assert hit_test(markers, 300.0, 300.0) is None


@pytest.fixture
def canvas():
    return RecordingCanvas()


@pytest.fixture
def renders():
    return []


@pytest.fixture
def controller(renders):
    return ViewStateController(on_change=lambda state: renders.append(state.zoom))


@pytest.fixture
def dispatcher(controller, canvas, cities):
    return InteractionDispatcher(controller, canvas, cities)


@pytest.fixture
def markers():
    return {
        "81101": MarkerAttributes(x=100.0, y=200.0, radius=10.0, fill="red"),
        "04001": MarkerAttributes(x=400.0, y=200.0, radius=10.0, fill="red"),
    }


def test_hover_enter_highlights_and_shows_tooltip(dispatcher, canvas, markers):
    dispatcher.pointer_moved(102.0, 201.0, markers)
    assert dispatcher.hovered == "81101"
    assert canvas.calls == [
        ("highlight", "81101"),
        ("tooltip", "81101 Bratislava", 100.0, 200.0),
    ]


def test_tooltip_includes_population_when_sizing(dispatcher, controller, canvas, markers):
    controller.set_size_by_population(True)
    dispatcher.pointer_moved(100.0, 200.0, markers)
    assert canvas.calls[-1] == ("tooltip", "81101 Bratislava\n475 503", 100.0, 200.0)


def test_moving_within_marker_does_not_repeat(dispatcher, canvas, markers):
    dispatcher.pointer_moved(100.0, 200.0, markers)
    dispatcher.pointer_moved(101.0, 199.0, markers)
    assert len(canvas.calls) == 2


def test_hover_exit_clears_highlight_and_tooltip(dispatcher, canvas, markers):
    dispatcher.pointer_moved(100.0, 200.0, markers)
    canvas.calls.clear()
    dispatcher.pointer_moved(250.0, 250.0, markers)
    assert dispatcher.hovered is None
    assert canvas.calls == [("highlight", None), ("hide_tooltip",)]


def test_moving_between_markers(dispatcher, canvas, markers):
    dispatcher.pointer_moved(100.0, 200.0, markers)
    canvas.calls.clear()
    dispatcher.pointer_moved(400.0, 200.0, markers)
    assert canvas.calls[:2] == [("highlight", None), ("hide_tooltip",)]
    assert canvas.calls[2] == ("highlight", "04001")


def test_leaving_axes_exits_hover(dispatcher, markers):
    dispatcher.pointer_moved(100.0, 200.0, markers)
    dispatcher.pointer_moved(None, None, markers)
    assert dispatcher.hovered is None


def test_zoom_gesture_forwards_to_controller(dispatcher, controller, renders):
    dispatcher.zoom_gesture(ZoomDelta(factor=2.0))
    dispatcher.zoom_gesture(ZoomDelta(factor=100.0))
    assert controller.state.zoom.scale == 15.0
    assert [zoom.scale for zoom in renders] == [2.0, 15.0]


def test_zoom_gesture_hides_tooltip(dispatcher, canvas, markers):
    dispatcher.pointer_moved(100.0, 200.0, markers)
    dispatcher.zoom_gesture(ZoomDelta(dx=5.0))
    assert dispatcher.hovered is None
    assert ("hide_tooltip",) in canvas.calls


def test_refresh_moves_tooltip_with_marker(dispatcher, canvas, markers):
    dispatcher.pointer_moved(100.0, 200.0, markers)
    moved = dict(markers)
    moved["81101"] = MarkerAttributes(x=150.0, y=220.0, radius=12.0, fill="blue")
    dispatcher.refresh(moved)
    assert canvas.calls[-1] == ("tooltip", "81101 Bratislava", 150.0, 220.0)


def test_refresh_exits_when_marker_disappears(dispatcher, markers):
    dispatcher.pointer_moved(100.0, 200.0, markers)
    dispatcher.refresh({})
    assert dispatcher.hovered is None
