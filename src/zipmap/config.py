"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

CATEGORY10 = (
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
)


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _optional_mapping(raw: Mapping[str, Any], key: str, field_name: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    return _mapping(value, field_name)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _str_list(value: Any, field_name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_str(item, f"{field_name}[{idx}]"))
    return tuple(out)


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class PathsConfig:
    data_file: Path
    output_dir: Path
    logs_dir: Path

    @property
    def build_directories(self) -> tuple[Path, ...]:
        return (self.output_dir, self.logs_dir)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            data_file=_path_from_cfg(raw.get("data_file"), "paths.data_file", root_dir),
            output_dir=_path_from_cfg(raw.get("output_dir", "build"), "paths.output_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir", "build/logs"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class ScaleConfig:
    min_radius: float = 2.0
    max_radius: float = 20.0
    fixed_radius: float = 4.0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ScaleConfig:
        min_radius = _float(raw.get("min_radius", 2.0), "scale.min_radius")
        max_radius = _float(raw.get("max_radius", 20.0), "scale.max_radius")
        fixed_radius = _float(raw.get("fixed_radius", 4.0), "scale.fixed_radius")
        if min_radius <= 0:
            raise ValueError("scale.min_radius must be > 0")
        if max_radius < min_radius:
            raise ValueError("scale.max_radius cannot be smaller than scale.min_radius")
        if fixed_radius <= 0:
            raise ValueError("scale.fixed_radius must be > 0")
        return cls(min_radius=min_radius, max_radius=max_radius, fixed_radius=fixed_radius)


@dataclass(frozen=True, slots=True)
class ZoomConfig:
    min_scale: float = 1.0
    max_scale: float = 15.0
    wheel_step: float = 1.2

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ZoomConfig:
        min_scale = _float(raw.get("min_scale", 1.0), "zoom.min_scale")
        max_scale = _float(raw.get("max_scale", 15.0), "zoom.max_scale")
        wheel_step = _float(raw.get("wheel_step", 1.2), "zoom.wheel_step")
        if min_scale <= 0:
            raise ValueError("zoom.min_scale must be > 0")
        if max_scale < min_scale:
            raise ValueError("zoom.max_scale cannot be smaller than zoom.min_scale")
        if wheel_step <= 1.0:
            raise ValueError("zoom.wheel_step must be > 1")
        return cls(min_scale=min_scale, max_scale=max_scale, wheel_step=wheel_step)


@dataclass(frozen=True, slots=True)
class ColorsConfig:
    match: str = "#333333"
    non_match: str = "#d9d9d9"
    highlight: str = "#000000"
    digits: tuple[str, ...] = CATEGORY10

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ColorsConfig:
        digits_raw = raw.get("digits")
        digits = CATEGORY10 if digits_raw is None else _str_list(digits_raw, "colors.digits")
        if len(digits) != 10:
            raise ValueError("colors.digits must list exactly 10 colors")
        return cls(
            match=_str(raw.get("match", "#333333"), "colors.match"),
            non_match=_str(raw.get("non_match", "#d9d9d9"), "colors.non_match"),
            highlight=_str(raw.get("highlight", "#000000"), "colors.highlight"),
            digits=digits,
        )


@dataclass(frozen=True, slots=True)
class TransitionConfig:
    duration_ms: int = 750
    frame_interval_ms: int = 25

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> TransitionConfig:
        duration_ms = _int(raw.get("duration_ms", 750), "transition.duration_ms")
        frame_interval_ms = _int(raw.get("frame_interval_ms", 25), "transition.frame_interval_ms")
        if duration_ms < 0:
            raise ValueError("transition.duration_ms must be >= 0")
        if frame_interval_ms <= 0:
            raise ValueError("transition.frame_interval_ms must be > 0")
        return cls(duration_ms=duration_ms, frame_interval_ms=frame_interval_ms)


@dataclass(frozen=True, slots=True)
class FigureConfig:
    width_px: int = 960
    height_px: int = 600
    dpi: int = 100
    background: str = "white"
    padding_px: int = 40

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> FigureConfig:
        width_px = _int(raw.get("width_px", 960), "figure.width_px")
        height_px = _int(raw.get("height_px", 600), "figure.height_px")
        dpi = _int(raw.get("dpi", 100), "figure.dpi")
        padding_px = _int(raw.get("padding_px", 40), "figure.padding_px")
        if width_px <= 0 or height_px <= 0:
            raise ValueError("figure.width_px and figure.height_px must be > 0")
        if dpi <= 0:
            raise ValueError("figure.dpi must be > 0")
        if padding_px < 0 or 2 * padding_px >= min(width_px, height_px):
            raise ValueError("figure.padding_px must be >= 0 and leave room for the map")
        return cls(
            width_px=width_px,
            height_px=height_px,
            dpi=dpi,
            background=_str(raw.get("background", "white"), "figure.background"),
            padding_px=padding_px,
        )


@dataclass(frozen=True, slots=True)
class TooltipConfig:
    thousands_separator: str = " "

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> TooltipConfig:
        separator = raw.get("thousands_separator", " ")
        if not isinstance(separator, str):
            raise ValueError("Expected string for 'tooltip.thousands_separator'")
        return cls(thousands_separator=separator)


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path | None
    paths: PathsConfig
    scale: ScaleConfig
    zoom: ZoomConfig
    colors: ColorsConfig
    transition: TransitionConfig
    figure: FigureConfig
    tooltip: TooltipConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        return cls(
            source_path=source_path.resolve(),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            scale=ScaleConfig.from_mapping(_optional_mapping(raw, "scale", "scale")),
            zoom=ZoomConfig.from_mapping(_optional_mapping(raw, "zoom", "zoom")),
            colors=ColorsConfig.from_mapping(_optional_mapping(raw, "colors", "colors")),
            transition=TransitionConfig.from_mapping(
                _optional_mapping(raw, "transition", "transition")
            ),
            figure=FigureConfig.from_mapping(_optional_mapping(raw, "figure", "figure")),
            tooltip=TooltipConfig.from_mapping(_optional_mapping(raw, "tooltip", "tooltip")),
        )

    @classmethod
    def default(cls, data_file: Path, output_dir: Path | None = None) -> AppConfig:
        """Build a config with default settings for library use."""
        out = output_dir if output_dir is not None else data_file.parent / "build"
        return cls(
            source_path=None,
            paths=PathsConfig(data_file=data_file, output_dir=out, logs_dir=out / "logs"),
            scale=ScaleConfig(),
            zoom=ZoomConfig(),
            colors=ColorsConfig(),
            transition=TransitionConfig(),
            figure=FigureConfig(),
            tooltip=TooltipConfig(),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ValueError(f"Malformed YAML in {cfg_path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
