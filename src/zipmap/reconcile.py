"""Marker reconciliation: desired marker set vs. what is currently drawn."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Sequence

from .colors import ColorPalette, color_for
from .models import City, MarkerAttributes, ViewState, ZoomTransform
from .scales import MapGeometry, Projector, RadiusScale

_LOGGER = logging.getLogger("zipmap.reconcile")


@dataclass(frozen=True, slots=True)
class EnterMarker:
    key: str
    target: MarkerAttributes
    kind: Literal["enter"] = "enter"


@dataclass(frozen=True, slots=True)
class UpdateMarker:
    key: str
    target: MarkerAttributes
    kind: Literal["update"] = "update"


@dataclass(frozen=True, slots=True)
class ExitMarker:
    key: str
    kind: Literal["exit"] = "exit"


MarkerOp = EnterMarker | UpdateMarker | ExitMarker


@dataclass(frozen=True, slots=True)
class RenderPass:
    """Three-way diff plus the full target marker set of one render."""

    enter: tuple[EnterMarker, ...]
    update: tuple[UpdateMarker, ...]
    exit: tuple[ExitMarker, ...]
    markers: Mapping[str, MarkerAttributes] = field(default_factory=dict)
    duration_ms: int = 0

    @property
    def operations(self) -> tuple[MarkerOp, ...]:
        return (*self.exit, *self.update, *self.enter)

    @property
    def is_update_only(self) -> bool:
        return not self.enter and not self.exit

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration_ms": self.duration_ms,
            "enter": [op.key for op in self.enter],
            "update": [op.key for op in self.update],
            "exit": [op.key for op in self.exit],
            "markers": {key: attrs.to_dict() for key, attrs in self.markers.items()},
        }


class Reconciler:
    """Computes target marker attributes and the diff against the last pass.

    The only retained state is the ordered set of drawn marker keys.
    """

    def __init__(
        self,
        geometry: MapGeometry,
        radius_scale: RadiusScale,
        *,
        palette: ColorPalette | None = None,
        fixed_radius: float = 4.0,
        duration_ms: int = 750,
    ) -> None:
        self.geometry = geometry
        self.radius_scale = radius_scale
        self.palette = palette if palette is not None else ColorPalette()
        self.fixed_radius = fixed_radius
        self.duration_ms = duration_ms
        self._drawn: tuple[str, ...] = ()
        self._projector: Projector | None = None

    @property
    def drawn_keys(self) -> tuple[str, ...]:
        return self._drawn

    def reset(self) -> None:
        self._drawn = ()

    def projector_for(self, zoom: ZoomTransform) -> Projector:
        if self._projector is None or self._projector.params.zoom != zoom:
            self._projector = self.geometry.projector(zoom)
        return self._projector

    def compute_markers(
        self,
        cities: Sequence[City],
        view_state: ViewState,
    ) -> dict[str, MarkerAttributes]:
        projector = self.projector_for(view_state.zoom)
        targets: dict[str, MarkerAttributes] = {}
        for city in cities:
            if city.key in targets:
                _LOGGER.debug("Skipping duplicate postal code %s (%s)", city.key, city.name)
                continue
            x, y = projector.project(city.longitude, city.latitude)
            if view_state.size_by_population:
                radius = self.radius_scale(city.population)
            else:
                radius = self.fixed_radius
            fill = color_for(
                view_state.filter_text,
                city.postal_code,
                view_state.color_by_match,
                self.palette,
            )
            targets[city.key] = MarkerAttributes(x=x, y=y, radius=radius, fill=fill)
        return targets

    def render(self, cities: Sequence[City], view_state: ViewState) -> RenderPass:
        targets = self.compute_markers(cities, view_state)
        previous = set(self._drawn)
        enter: list[EnterMarker] = []
        update: list[UpdateMarker] = []
        for key, attrs in targets.items():
            if key in previous:
                update.append(UpdateMarker(key=key, target=attrs))
            else:
                enter.append(EnterMarker(key=key, target=attrs))
        exit_ops = tuple(ExitMarker(key=key) for key in self._drawn if key not in targets)
        self._drawn = tuple(targets)
        _LOGGER.debug(
            "Render pass: enter=%d update=%d exit=%d",
            len(enter),
            len(update),
            len(exit_ops),
        )
        return RenderPass(
            enter=tuple(enter),
            update=tuple(update),
            exit=exit_ops,
            markers=targets,
            duration_ms=self.duration_ms,
        )
