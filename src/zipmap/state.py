"""View state ownership and mutation."""

from __future__ import annotations

import logging
from typing import Callable

from .models import POSTAL_CODE_LENGTH, ViewState, ZoomDelta, ZoomTransform, is_ascii_digits
from .scales import apply_zoom_delta, clamp_scale

_LOGGER = logging.getLogger("zipmap.state")

RenderTrigger = Callable[[ViewState], None]


def is_valid_filter(text: str) -> bool:
    if text == "":
        return True
    return len(text) <= POSTAL_CODE_LENGTH and is_ascii_digits(text)


class ViewStateController:
    """Sole owner of the ViewState.

    Every successful mutation calls the render trigger synchronously, one
    full recomputation per change.
    """

    def __init__(
        self,
        *,
        min_scale: float = 1.0,
        max_scale: float = 15.0,
        origin: tuple[float, float] = (0.0, 0.0),
        initial: ViewState | None = None,
        on_change: RenderTrigger | None = None,
    ) -> None:
        if min_scale <= 0 or max_scale < min_scale:
            raise ValueError("zoom scale bounds must satisfy 0 < min_scale <= max_scale")
        self.min_scale = min_scale
        self.max_scale = max_scale
        self.origin = origin
        self._state = initial if initial is not None else ViewState()
        if not is_valid_filter(self._state.filter_text):
            raise ValueError(f"Invalid initial filter text: {self._state.filter_text!r}")
        self._initial_zoom = self._clamped(self._state.zoom)
        self._state.zoom = self._initial_zoom
        self._on_change = on_change

    @property
    def state(self) -> ViewState:
        return self._state

    def bind(self, on_change: RenderTrigger | None) -> None:
        self._on_change = on_change

    def set_size_by_population(self, enabled: bool) -> None:
        self._state.size_by_population = bool(enabled)
        self._changed("size_by_population")

    def set_color_by_match(self, enabled: bool) -> None:
        self._state.color_by_match = bool(enabled)
        self._changed("color_by_match")

    def set_filter_text(self, text: str) -> bool:
        if not is_valid_filter(text):
            _LOGGER.debug(
                "Rejected filter text %r; keeping %r", text, self._state.filter_text
            )
            return False
        self._state.filter_text = text
        self._changed("filter_text")
        return True

    def apply_zoom_delta(self, delta: ZoomDelta) -> ZoomTransform:
        self._state.zoom = apply_zoom_delta(
            self._state.zoom,
            delta,
            min_scale=self.min_scale,
            max_scale=self.max_scale,
            origin=self.origin,
        )
        self._changed("zoom")
        return self._state.zoom

    def reset_zoom(self) -> None:
        self._state.zoom = self._initial_zoom
        self._changed("zoom")

    def _clamped(self, zoom: ZoomTransform) -> ZoomTransform:
        scale = clamp_scale(zoom.scale, min_scale=self.min_scale, max_scale=self.max_scale)
        return ZoomTransform(translate_x=zoom.translate_x, translate_y=zoom.translate_y, scale=scale)

    def _changed(self, field_name: str) -> None:
        _LOGGER.debug("View state changed: %s", field_name)
        if self._on_change is not None:
            self._on_change(self._state)
