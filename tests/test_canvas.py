"""Tests for the matplotlib drawing surface."""

import pytest
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure

from zipmap.canvas import MatplotlibCanvas, draw_pass, ease_cubic_in_out, prepare_axes
from zipmap.models import MarkerAttributes
from zipmap.reconcile import EnterMarker, ExitMarker, RenderPass, UpdateMarker


@pytest.fixture
def ax():
    fig = Figure(figsize=(9.6, 6.0), dpi=100)
    axes = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    prepare_axes(axes, width=960, height=600, background="white")
    return axes


@pytest.fixture
def clock():
    return [0.0]


def _attrs(x=100.0, y=200.0, radius=8.0, fill="#ff0000"):
    return MarkerAttributes(x=x, y=y, radius=radius, fill=fill)


def test_ease_cubic_in_out():
    assert ease_cubic_in_out(-1.0) == 0.0
    assert ease_cubic_in_out(0.0) == 0.0
    assert ease_cubic_in_out(0.5) == pytest.approx(0.5)
    assert ease_cubic_in_out(0.25) == pytest.approx(0.0625)
    assert ease_cubic_in_out(1.0) == 1.0
    assert ease_cubic_in_out(2.0) == 1.0


def test_prepare_axes_uses_screen_coordinates(ax):
    assert ax.get_xlim() == (0.0, 960.0)
    assert ax.get_ylim() == (600.0, 0.0)


def test_static_canvas_applies_targets_immediately(ax):
    canvas = MatplotlibCanvas(ax, animate=False)
    render_pass = RenderPass(
        enter=(EnterMarker(key="a", target=_attrs()), EnterMarker(key="b", target=_attrs(x=300.0))),
        update=(),
        exit=(),
        duration_ms=750,
    )
    draw_pass(canvas, render_pass)
    assert canvas.keys == ("a", "b")
    circle = canvas.circle("a")
    assert tuple(circle.center) == (100.0, 200.0)
    assert circle.get_radius() == 8.0
    assert tuple(circle.get_facecolor()) == pytest.approx(to_rgba("#ff0000"))
    assert not canvas.animating

    draw_pass(
        canvas,
        RenderPass(
            enter=(),
            update=(UpdateMarker(key="b", target=_attrs(x=310.0, radius=3.0, fill="blue")),),
            exit=(ExitMarker(key="a"),),
            duration_ms=750,
        ),
    )
    assert canvas.keys == ("b",)
    assert tuple(canvas.circle("b").center) == (310.0, 200.0)
    assert canvas.circle("b").get_radius() == 3.0
    assert tuple(canvas.circle("b").get_facecolor()) == pytest.approx(to_rgba("blue"))


def test_enter_grows_from_zero_radius(ax, clock):
    canvas = MatplotlibCanvas(ax, animate=True, clock=lambda: clock[0])
    canvas.add_marker("a", _attrs(radius=8.0), 1000)
    assert canvas.circle("a").get_radius() == 0.0
    assert canvas.animating
    canvas.step(0.5)
    assert canvas.circle("a").get_radius() == pytest.approx(4.0)
    canvas.step(1.0)
    assert canvas.circle("a").get_radius() == 8.0
    assert not canvas.animating


def test_update_interpolates_position_and_color(ax, clock):
    canvas = MatplotlibCanvas(ax, animate=True, clock=lambda: clock[0])
    canvas.add_marker("a", _attrs(x=0.0, fill="#000000"), 0)
    canvas.update_marker("a", _attrs(x=100.0, fill="#ffffff"), 1000)
    canvas.step(0.5)
    circle = canvas.circle("a")
    assert circle.center[0] == pytest.approx(50.0)
    assert circle.get_facecolor()[0] == pytest.approx(0.5)
    canvas.step(2.0)
    assert circle.center[0] == 100.0


def test_exit_shrinks_then_removes(ax, clock):
    canvas = MatplotlibCanvas(ax, animate=True, clock=lambda: clock[0])
    canvas.add_marker("a", _attrs(), 0)
    clock[0] = 10.0
    canvas.remove_marker("a", 500)
    assert "a" in canvas.keys
    canvas.step(10.25)
    assert canvas.circle("a").get_radius() == pytest.approx(4.0)
    canvas.step(10.5)
    assert canvas.keys == ()


def test_re_entering_marker_cancels_removal(ax, clock):
    canvas = MatplotlibCanvas(ax, animate=True, clock=lambda: clock[0])
    canvas.add_marker("a", _attrs(), 0)
    canvas.remove_marker("a", 500)
    canvas.add_marker("a", _attrs(radius=6.0), 500)
    canvas.step(1.0)
    assert canvas.keys == ("a",)
    assert canvas.circle("a").get_radius() == 6.0


def test_finish_jumps_to_end_state(ax, clock):
    canvas = MatplotlibCanvas(ax, animate=True, clock=lambda: clock[0])
    canvas.add_marker("a", _attrs(radius=8.0), 1000)
    canvas.add_marker("b", _attrs(), 0)
    canvas.remove_marker("b", 1000)
    canvas.finish()
    assert canvas.keys == ("a",)
    assert canvas.circle("a").get_radius() == 8.0


def test_highlight_sets_and_clears_stroke(ax):
    canvas = MatplotlibCanvas(ax, animate=False, highlight_color="#000000")
    canvas.add_marker("a", _attrs(), 0)
    canvas.add_marker("b", _attrs(x=300.0), 0)
    canvas.set_highlight("a")
    assert canvas.circle("a").get_linewidth() == 1.5
    canvas.set_highlight("b")
    assert canvas.circle("a").get_linewidth() == 0.0
    assert canvas.circle("b").get_linewidth() == 1.5
    canvas.set_highlight(None)
    assert canvas.circle("b").get_linewidth() == 0.0


def test_highlight_unknown_marker_is_ignored(ax):
    canvas = MatplotlibCanvas(ax, animate=False)
    canvas.set_highlight("missing")
    canvas.remove_marker("missing", 0)
    assert canvas.keys == ()


def test_tooltip_show_and_hide(ax):
    canvas = MatplotlibCanvas(ax, animate=False)
    assert not canvas.tooltip_visible
    canvas.show_tooltip("81101 Bratislava", 100.0, 200.0)
    assert canvas.tooltip_visible
    assert canvas.tooltip_text == "81101 Bratislava"
    canvas.hide_tooltip()
    assert not canvas.tooltip_visible


def test_drawn_markers_follow_running_transitions(ax, clock):
    canvas = MatplotlibCanvas(ax, animate=True, clock=lambda: clock[0])
    canvas.add_marker("a", _attrs(x=0.0, fill="#000000"), 0)
    canvas.add_marker("b", _attrs(x=300.0), 0)
    canvas.update_marker("a", _attrs(x=100.0, fill="#000000"), 1000)
    canvas.remove_marker("b", 1000)
    canvas.step(0.5)
    drawn = canvas.drawn_markers()
    assert set(drawn) == {"a"}
    assert drawn["a"].x == pytest.approx(50.0)
    assert drawn["a"].radius == 8.0
    assert drawn["a"].fill == "#000000"
