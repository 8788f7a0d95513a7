"""Pointer and gesture routing: hover tooltips, highlight, zoom/pan."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from .canvas import Canvas
from .models import City, MarkerAttributes, ZoomDelta
from .state import ViewStateController

_LOGGER = logging.getLogger("zipmap.interaction")


def format_population(population: int, separator: str = " ") -> str:
    """Group digits by three from the right, e.g. 1200000 -> '1 200 000'."""
    return f"{population:,d}".replace(",", separator)


def tooltip_text(city: City, *, show_population: bool, separator: str = " ") -> str:
    lines = [f"{city.postal_code} {city.name}"]
    if show_population:
        lines.append(format_population(city.population, separator))
    return "\n".join(lines)


def hit_test(markers: Mapping[str, MarkerAttributes], x: float, y: float) -> str | None:
    """Key of the marker under (x, y); the smallest one wins when they overlap."""
    best_key: str | None = None
    best_radius = float("inf")
    for key, attrs in markers.items():
        if attrs.contains(x, y) and attrs.radius < best_radius:
            best_key = key
            best_radius = attrs.radius
    return best_key


class InteractionDispatcher:
    def __init__(
        self,
        controller: ViewStateController,
        canvas: Canvas,
        cities: Sequence[City],
        *,
        thousands_separator: str = " ",
    ) -> None:
        self.controller = controller
        self.canvas = canvas
        self.thousands_separator = thousands_separator
        self._cities = {city.key: city for city in cities}
        self._hovered: str | None = None

    @property
    def hovered(self) -> str | None:
        return self._hovered

    def hover_enter(self, key: str, x: float, y: float) -> None:
        city = self._cities.get(key)
        if city is None:
            return
        self._hovered = key
        self.canvas.set_highlight(key)
        text = tooltip_text(
            city,
            show_population=self.controller.state.size_by_population,
            separator=self.thousands_separator,
        )
        self.canvas.show_tooltip(text, x, y)

    def hover_exit(self) -> None:
        if self._hovered is None:
            return
        self._hovered = None
        self.canvas.set_highlight(None)
        self.canvas.hide_tooltip()

    def pointer_moved(
        self,
        x: float | None,
        y: float | None,
        markers: Mapping[str, MarkerAttributes],
    ) -> None:
        if x is None or y is None:
            self.hover_exit()
            return
        key = hit_test(markers, x, y)
        if key == self._hovered:
            return
        self.hover_exit()
        if key is not None:
            attrs = markers[key]
            self.hover_enter(key, attrs.x, attrs.y)

    def refresh(self, markers: Mapping[str, MarkerAttributes]) -> None:
        """Re-anchor the tooltip after a render pass moved or restyled markers."""
        key = self._hovered
        if key is None:
            return
        attrs = markers.get(key)
        if attrs is None:
            self.hover_exit()
            return
        self.hover_enter(key, attrs.x, attrs.y)

    def zoom_gesture(self, delta: ZoomDelta) -> None:
        self.hover_exit()
        zoom = self.controller.apply_zoom_delta(delta)
        _LOGGER.debug(
            "Zoom gesture -> scale=%.3f translate=(%.1f, %.1f)",
            zoom.scale,
            zoom.translate_x,
            zoom.translate_y,
        )
