"""Postal-code prefix matching and marker color resolution."""

from __future__ import annotations

from dataclasses import dataclass

from .config import CATEGORY10, ColorsConfig
from .models import POSTAL_CODE_LENGTH


@dataclass(frozen=True, slots=True)
class ColorPalette:
    match: str = "#333333"
    non_match: str = "#d9d9d9"
    digits: tuple[str, ...] = CATEGORY10

    def __post_init__(self) -> None:
        if len(self.digits) != 10:
            raise ValueError("digit palette must have exactly 10 colors")

    @classmethod
    def from_config(cls, cfg: ColorsConfig) -> ColorPalette:
        return cls(match=cfg.match, non_match=cfg.non_match, digits=cfg.digits)

    def for_digit(self, digit: str) -> str:
        return self.digits[int(digit)]


def matches(filter_text: str, postal_code: str) -> bool:
    return postal_code.startswith(filter_text)


def color_for(
    filter_text: str,
    postal_code: str,
    color_enabled: bool,
    palette: ColorPalette | None = None,
) -> str:
    """Resolve a marker's fill color.

    Non-matching codes always get the non-match color. Matching codes get the
    match color unless coloring is on and a next digit remains, in which case
    the color is keyed by that digit.
    """
    pal = palette if palette is not None else ColorPalette()
    if not matches(filter_text, postal_code):
        return pal.non_match
    if not color_enabled:
        return pal.match
    if len(filter_text) >= POSTAL_CODE_LENGTH:
        return pal.match
    return pal.for_digit(postal_code[len(filter_text)])
