"""Drawing surface contract and its matplotlib implementation."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Protocol

from .models import MarkerAttributes
from .reconcile import RenderPass

_LOGGER = logging.getLogger("zipmap.canvas")

_RGBA = tuple[float, float, float, float]


class Canvas(Protocol):
    def add_marker(self, key: str, target: MarkerAttributes, duration_ms: int) -> None: ...

    def update_marker(self, key: str, target: MarkerAttributes, duration_ms: int) -> None: ...

    def remove_marker(self, key: str, duration_ms: int) -> None: ...

    def set_highlight(self, key: str | None) -> None: ...

    def show_tooltip(self, text: str, x: float, y: float) -> None: ...

    def hide_tooltip(self) -> None: ...

    def flush(self) -> None: ...


def draw_pass(canvas: Canvas, render_pass: RenderPass) -> None:
    """Replay a render pass onto a canvas: exits first, then updates, then enters."""
    duration = render_pass.duration_ms
    for op in render_pass.exit:
        canvas.remove_marker(op.key, duration)
    for op in render_pass.update:
        canvas.update_marker(op.key, op.target, duration)
    for op in render_pass.enter:
        canvas.add_marker(op.key, op.target, duration)
    canvas.flush()


def ease_cubic_in_out(t: float) -> float:
    if t <= 0.0:
        return 0.0
    if t >= 1.0:
        return 1.0
    if t < 0.5:
        return 4.0 * t * t * t
    u = -2.0 * t + 2.0
    return 1.0 - (u * u * u) / 2.0


@dataclass(frozen=True, slots=True)
class _Visual:
    x: float
    y: float
    radius: float
    rgba: _RGBA

    def lerp(self, other: _Visual, t: float) -> _Visual:
        return _Visual(
            x=_lerp(self.x, other.x, t),
            y=_lerp(self.y, other.y, t),
            radius=_lerp(self.radius, other.radius, t),
            rgba=(
                _lerp(self.rgba[0], other.rgba[0], t),
                _lerp(self.rgba[1], other.rgba[1], t),
                _lerp(self.rgba[2], other.rgba[2], t),
                _lerp(self.rgba[3], other.rgba[3], t),
            ),
        )


@dataclass(frozen=True, slots=True)
class _Transition:
    start: _Visual
    end: _Visual
    started_at: float
    duration_s: float
    remove_on_end: bool = False


class MatplotlibCanvas:
    """Circle markers and a tooltip annotation on a matplotlib Axes.

    Axes data coordinates are screen units (y pointing down). With
    ``animate`` on, attribute changes are interpolated on a figure timer;
    otherwise targets are applied immediately.
    """

    def __init__(
        self,
        ax: Any,
        *,
        animate: bool = True,
        frame_interval_ms: int = 25,
        highlight_color: str = "#000000",
        highlight_width: float = 1.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ax = ax
        self.animate = animate
        self.highlight_color = highlight_color
        self.highlight_width = highlight_width
        self._clock = clock
        self._circles: dict[str, Any] = {}
        self._visuals: dict[str, _Visual] = {}
        self._transitions: dict[str, _Transition] = {}
        self._highlighted: str | None = None
        self._tooltip = ax.annotate(
            "",
            xy=(0.0, 0.0),
            xytext=(12, 12),
            textcoords="offset points",
            fontsize=9,
            bbox={"boxstyle": "round,pad=0.4", "fc": "white", "ec": "#999999", "alpha": 0.95},
            zorder=10,
            annotation_clip=False,
        )
        self._tooltip.set_visible(False)
        self._timer = None
        if animate:
            self._timer = ax.figure.canvas.new_timer(interval=frame_interval_ms)
            self._timer.add_callback(self.step)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self._circles)

    @property
    def animating(self) -> bool:
        return bool(self._transitions)

    @property
    def tooltip_visible(self) -> bool:
        return bool(self._tooltip.get_visible())

    @property
    def tooltip_text(self) -> str:
        return str(self._tooltip.get_text())

    def circle(self, key: str) -> Any:
        return self._circles[key]

    def drawn_markers(self) -> dict[str, MarkerAttributes]:
        """Markers where they are drawn right now; exiting markers are left out."""
        to_hex = _require_to_hex()
        drawn: dict[str, MarkerAttributes] = {}
        for key, visual in self._visuals.items():
            transition = self._transitions.get(key)
            if transition is not None and transition.remove_on_end:
                continue
            drawn[key] = MarkerAttributes(
                x=visual.x,
                y=visual.y,
                radius=visual.radius,
                fill=to_hex(visual.rgba, keep_alpha=False),
            )
        return drawn

    def add_marker(self, key: str, target: MarkerAttributes, duration_ms: int) -> None:
        end = _visual(target)
        if key in self._circles:
            self._transition_to(key, end, duration_ms)
            return
        circle_cls = _require_circle()
        circle = circle_cls(
            (end.x, end.y),
            radius=end.radius,
            facecolor=end.rgba,
            edgecolor="none",
            linewidth=0.0,
            zorder=2,
        )
        self.ax.add_patch(circle)
        self._circles[key] = circle
        start = _Visual(x=end.x, y=end.y, radius=0.0, rgba=end.rgba)
        self._set_visual(key, start)
        self._transition_to(key, end, duration_ms)

    def update_marker(self, key: str, target: MarkerAttributes, duration_ms: int) -> None:
        if key not in self._circles:
            self.add_marker(key, target, duration_ms)
            return
        self._transition_to(key, _visual(target), duration_ms)

    def remove_marker(self, key: str, duration_ms: int) -> None:
        current = self._visuals.get(key)
        if current is None:
            return
        if self._highlighted == key:
            self.set_highlight(None)
        end = _Visual(x=current.x, y=current.y, radius=0.0, rgba=current.rgba)
        self._transition_to(key, end, duration_ms, remove_on_end=True)

    def set_highlight(self, key: str | None) -> None:
        if self._highlighted is not None and self._highlighted in self._circles:
            previous = self._circles[self._highlighted]
            previous.set_edgecolor("none")
            previous.set_linewidth(0.0)
        self._highlighted = key if key in self._circles else None
        if self._highlighted is not None:
            circle = self._circles[self._highlighted]
            circle.set_edgecolor(self.highlight_color)
            circle.set_linewidth(self.highlight_width)
        self.flush()

    def show_tooltip(self, text: str, x: float, y: float) -> None:
        self._tooltip.set_text(text)
        self._tooltip.xy = (x, y)
        self._tooltip.set_visible(True)
        self.flush()

    def hide_tooltip(self) -> None:
        if self._tooltip.get_visible():
            self._tooltip.set_visible(False)
            self.flush()

    def flush(self) -> None:
        self.ax.figure.canvas.draw_idle()

    def step(self, now: float | None = None) -> None:
        """Advance all running transitions to ``now`` (timer callback)."""
        current_time = self._clock() if now is None else now
        finished: list[str] = []
        for key, transition in self._transitions.items():
            if transition.duration_s <= 0:
                t = 1.0
            else:
                t = (current_time - transition.started_at) / transition.duration_s
            eased = ease_cubic_in_out(t)
            self._set_visual(key, transition.start.lerp(transition.end, eased))
            if t >= 1.0:
                finished.append(key)
        for key in finished:
            transition = self._transitions.pop(key)
            if transition.remove_on_end:
                self._drop(key)
        if not self._transitions and self._timer is not None:
            self._timer.stop()
        self.flush()

    def finish(self) -> None:
        """Jump every running transition to its end state."""
        for key, transition in list(self._transitions.items()):
            self._set_visual(key, transition.end)
            del self._transitions[key]
            if transition.remove_on_end:
                self._drop(key)
        if self._timer is not None:
            self._timer.stop()

    def _transition_to(
        self,
        key: str,
        end: _Visual,
        duration_ms: int,
        *,
        remove_on_end: bool = False,
    ) -> None:
        if not self.animate or duration_ms <= 0:
            self._transitions.pop(key, None)
            if remove_on_end:
                self._drop(key)
            else:
                self._set_visual(key, end)
            return
        self._transitions[key] = _Transition(
            start=self._visuals[key],
            end=end,
            started_at=self._clock(),
            duration_s=duration_ms / 1000.0,
            remove_on_end=remove_on_end,
        )
        if self._timer is not None:
            self._timer.start()

    def _set_visual(self, key: str, visual: _Visual) -> None:
        circle = self._circles[key]
        circle.set_center((visual.x, visual.y))
        circle.set_radius(visual.radius)
        circle.set_facecolor(visual.rgba)
        self._visuals[key] = visual

    def _drop(self, key: str) -> None:
        circle = self._circles.pop(key, None)
        self._visuals.pop(key, None)
        if circle is not None:
            circle.remove()
        if self._highlighted == key:
            self._highlighted = None


def prepare_axes(ax: Any, *, width: float, height: float, background: str) -> None:
    """Configure an Axes so that data coordinates are screen units."""
    ax.set_xlim(0.0, width)
    ax.set_ylim(height, 0.0)
    ax.set_aspect("equal", adjustable="box")
    ax.set_axis_off()
    ax.set_facecolor(background)
    ax.figure.patch.set_facecolor(background)


def _visual(attrs: MarkerAttributes) -> _Visual:
    to_rgba = _require_to_rgba()
    rgba = tuple(float(v) for v in to_rgba(attrs.fill))
    return _Visual(x=attrs.x, y=attrs.y, radius=attrs.radius, rgba=rgba)  # type: ignore[arg-type]


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


@lru_cache(maxsize=1)
def _require_circle() -> Any:
    try:
        from matplotlib.patches import Circle
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for marker drawing") from exc
    return Circle


@lru_cache(maxsize=1)
def _require_to_rgba() -> Any:
    try:
        from matplotlib.colors import to_rgba
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for color handling") from exc
    return to_rgba


@lru_cache(maxsize=1)
def _require_to_hex() -> Any:
    try:
        from matplotlib.colors import to_hex
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for color handling") from exc
    return to_hex
