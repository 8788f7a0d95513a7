"""Population radius scale and geographic-to-screen projection."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Sequence

from .models import City, ZoomDelta, ZoomTransform
from .records import median_center, population_extent

_LOGGER = logging.getLogger("zipmap.scales")

# Projected half-span floor (metres) so a single-city dataset still gets a finite fit.
_MIN_HALF_SPAN_M = 5_000.0


@dataclass(frozen=True, slots=True)
class RadiusScale:
    """Square-root scale: marker area grows linearly with population."""

    min_population: int
    max_population: int
    min_radius: float = 2.0
    max_radius: float = 20.0

    @classmethod
    def for_cities(
        cls,
        cities: Sequence[City],
        *,
        min_radius: float = 2.0,
        max_radius: float = 20.0,
    ) -> RadiusScale:
        min_pop, max_pop = population_extent(cities)
        return cls(
            min_population=min_pop,
            max_population=max_pop,
            min_radius=min_radius,
            max_radius=max_radius,
        )

    def __call__(self, population: int) -> float:
        span = self.max_population - self.min_population
        if span <= 0:
            return (self.min_radius + self.max_radius) / 2.0
        if population <= self.min_population:
            return self.min_radius
        if population >= self.max_population:
            return self.max_radius
        t = math.sqrt((population - self.min_population) / span)
        return self.min_radius + (self.max_radius - self.min_radius) * t


@dataclass(frozen=True, slots=True)
class ProjectionParams:
    """Immutable projection parameters for one render pass."""

    center_lon: float
    center_lat: float
    base_scale: float
    width: float
    height: float
    zoom: ZoomTransform


class Projector:
    """Maps lon/lat degrees to screen coordinates for fixed parameters.

    Screen y grows downward. The underlying transverse Mercator transformer
    is cached per center, so re-parameterizing on zoom is cheap.
    """

    def __init__(self, params: ProjectionParams) -> None:
        self.params = params
        self._transformer = _centered_transformer(params.center_lon, params.center_lat)
        self._k = params.base_scale * params.zoom.scale
        self._origin_x = params.width / 2.0 + params.zoom.translate_x
        self._origin_y = params.height / 2.0 + params.zoom.translate_y

    def project(self, longitude: float, latitude: float) -> tuple[float, float]:
        mx, my = self._transformer.transform(float(longitude), float(latitude))
        return (self._origin_x + mx * self._k, self._origin_y - my * self._k)

    def __call__(self, longitude: float, latitude: float) -> tuple[float, float]:
        return self.project(longitude, latitude)


@dataclass(frozen=True, slots=True)
class MapGeometry:
    """Dataset-derived projection constants, computed once at load."""

    center_lon: float
    center_lat: float
    base_scale: float
    width: float
    height: float

    @classmethod
    def from_cities(
        cls,
        cities: Sequence[City],
        *,
        width: float,
        height: float,
        padding: float = 0.0,
    ) -> MapGeometry:
        center_lon, center_lat = median_center(cities)
        transformer = _centered_transformer(center_lon, center_lat)
        half_x = _MIN_HALF_SPAN_M
        half_y = _MIN_HALF_SPAN_M
        for city in cities:
            mx, my = transformer.transform(city.longitude, city.latitude)
            half_x = max(half_x, abs(mx))
            half_y = max(half_y, abs(my))
        usable_x = max(width / 2.0 - padding, 1.0)
        usable_y = max(height / 2.0 - padding, 1.0)
        base_scale = min(usable_x / half_x, usable_y / half_y)
        _LOGGER.debug(
            "Map geometry: center=(%.4f, %.4f) base_scale=%.6g px/m",
            center_lon,
            center_lat,
            base_scale,
        )
        return cls(
            center_lon=center_lon,
            center_lat=center_lat,
            base_scale=base_scale,
            width=float(width),
            height=float(height),
        )

    def params(self, zoom: ZoomTransform) -> ProjectionParams:
        return ProjectionParams(
            center_lon=self.center_lon,
            center_lat=self.center_lat,
            base_scale=self.base_scale,
            width=self.width,
            height=self.height,
            zoom=zoom,
        )

    def projector(self, zoom: ZoomTransform) -> Projector:
        return Projector(self.params(zoom))


def clamp_scale(value: float, *, min_scale: float, max_scale: float) -> float:
    if math.isnan(value):
        return min_scale
    return min(max(value, min_scale), max_scale)


def apply_zoom_delta(
    zoom: ZoomTransform,
    delta: ZoomDelta,
    *,
    min_scale: float,
    max_scale: float,
    origin: tuple[float, float] = (0.0, 0.0),
) -> ZoomTransform:
    """Apply one gesture; scale is clamped, translation is not.

    ``origin`` is the screen point that translation (0, 0) refers to, needed
    to keep an anchored point fixed under scaling.
    """
    current = clamp_scale(zoom.scale, min_scale=min_scale, max_scale=max_scale)
    if math.isnan(delta.factor):
        scale = current
    else:
        scale = clamp_scale(current * delta.factor, min_scale=min_scale, max_scale=max_scale)

    tx = zoom.translate_x
    ty = zoom.translate_y
    if delta.anchor is not None and scale != current:
        ratio = scale / current
        ax = delta.anchor[0] - origin[0]
        ay = delta.anchor[1] - origin[1]
        tx = ax - (ax - tx) * ratio
        ty = ay - (ay - ty) * ratio

    tx += _finite_or_zero(delta.dx)
    ty += _finite_or_zero(delta.dy)
    return ZoomTransform(translate_x=tx, translate_y=ty, scale=scale)


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


@lru_cache(maxsize=8)
def _centered_transformer(center_lon: float, center_lat: float) -> Any:
    transformer_cls = _require_pyproj_transformer()
    crs = (
        f"+proj=tmerc +lat_0={center_lat} +lon_0={center_lon} "
        "+k=1 +x_0=0 +y_0=0 +ellps=WGS84 +units=m +no_defs"
    )
    return transformer_cls.from_crs("EPSG:4326", crs, always_xy=True)


def _require_pyproj_transformer() -> Any:
    try:
        from pyproj import Transformer
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("pyproj is required for map projection") from exc
    return Transformer
