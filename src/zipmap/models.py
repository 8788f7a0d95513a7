"""Domain models shared across the map pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

POSTAL_CODE_LENGTH = 5


@dataclass(frozen=True, slots=True)
class City:
    """One geocoded city record, created once at load time."""

    name: str
    postal_code: str
    population: int
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise ValueError("Expected string for 'name'")
        if len(self.postal_code) != POSTAL_CODE_LENGTH or not is_ascii_digits(self.postal_code):
            raise ValueError(f"Invalid postal_code: '{self.postal_code}'")
        if self.population < 0:
            raise ValueError(f"population must be >= 0, got {self.population}")
        if self.latitude < -90.0 or self.latitude > 90.0:
            raise ValueError(f"latitude must be between -90 and 90, got {self.latitude}")
        if self.longitude < -180.0 or self.longitude > 180.0:
            raise ValueError(f"longitude must be between -180 and 180, got {self.longitude}")

    @property
    def key(self) -> str:
        return self.postal_code


@dataclass(frozen=True, slots=True)
class ZoomTransform:
    """Current (scale, translate) pair applied on top of the initial fit."""

    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0

    @classmethod
    def identity(cls) -> ZoomTransform:
        return cls()


@dataclass(frozen=True, slots=True)
class ZoomDelta:
    """Raw zoom/pan gesture.

    ``factor`` multiplies the current scale, ``dx``/``dy`` shift the map in
    screen units. When ``anchor`` is set, the screen point under it stays
    fixed while the scale changes (scroll-wheel zoom around the pointer).
    """

    factor: float = 1.0
    dx: float = 0.0
    dy: float = 0.0
    anchor: tuple[float, float] | None = None


@dataclass(slots=True)
class ViewState:
    """Mutable UI state; only ViewStateController mutates it."""

    size_by_population: bool = False
    color_by_match: bool = False
    filter_text: str = ""
    zoom: ZoomTransform = field(default_factory=ZoomTransform.identity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "size_by_population": self.size_by_population,
            "color_by_match": self.color_by_match,
            "filter_text": self.filter_text,
            "zoom": {
                "translate_x": self.zoom.translate_x,
                "translate_y": self.zoom.translate_y,
                "scale": self.zoom.scale,
            },
        }


@dataclass(frozen=True, slots=True)
class MarkerAttributes:
    """Target visual attributes of one drawn marker."""

    x: float
    y: float
    radius: float
    fill: str

    def contains(self, x: float, y: float) -> bool:
        dx = x - self.x
        dy = y - self.y
        return dx * dx + dy * dy <= self.radius * self.radius

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "radius": self.radius, "fill": self.fill}


def is_ascii_digits(value: str) -> bool:
    return value.isascii() and value.isdigit()
