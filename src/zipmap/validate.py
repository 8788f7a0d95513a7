"""Validation layer for config and the city dataset."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from .config import AppConfig
from .models import City
from .records import CityLoadError, load_cities, population_extent


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks that the configured dataset loads and renders sensibly."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self) -> ValidationReport:
        report = ValidationReport()
        self._validate_config(report)
        cities = self._validate_data_file(report)
        if cities:
            self._validate_postal_codes(report, cities)
            self._validate_populations(report, cities)
        return report

    def _validate_config(self, report: ValidationReport) -> None:
        zoom = self.cfg.zoom
        scale = self.cfg.scale
        report.add_info(f"Zoom scale range: [{zoom.min_scale:g}, {zoom.max_scale:g}]")
        report.add_info(f"Radius range: [{scale.min_radius:g}, {scale.max_radius:g}]")
        if scale.fixed_radius > scale.max_radius:
            report.add_warning(
                f"scale.fixed_radius ({scale.fixed_radius:g}) exceeds scale.max_radius "
                f"({scale.max_radius:g})"
            )

    def _validate_data_file(self, report: ValidationReport) -> tuple[City, ...]:
        path = self.cfg.paths.data_file
        try:
            cities = load_cities(path)
        except CityLoadError as exc:
            report.add_error(f"Failed loading city data '{path}': {exc}")
            return ()
        if not cities:
            report.add_error(f"City data file has no rows: {path}")
            return ()
        report.add_info(f"Loaded {len(cities)} city records from {path}")
        report.summary["cities_total"] = len(cities)
        return cities

    def _validate_postal_codes(self, report: ValidationReport, cities: Sequence[City]) -> None:
        counts = Counter(city.postal_code for city in cities)
        duplicates = sorted(code for code, count in counts.items() if count > 1)
        report.summary["duplicate_postal_codes"] = len(duplicates)
        if duplicates:
            report.add_warning(
                "Duplicate postal codes (only the first city per code is drawn): "
                + _format_code_list(duplicates)
            )
        first_digits = sorted({city.postal_code[0] for city in cities})
        report.add_info(f"Leading postal-code digits present: {', '.join(first_digits)}")

    def _validate_populations(self, report: ValidationReport, cities: Sequence[City]) -> None:
        min_pop, max_pop = population_extent(cities)
        report.add_info(f"Population range: {min_pop} .. {max_pop}")
        if min_pop == max_pop:
            report.add_warning("All cities share one population; size-by-population is flat")
        zero = [city.name for city in cities if city.population == 0]
        if zero:
            report.add_warning(f"Cities with zero population: {_format_code_list(zero)}")


def format_report_lines(report: ValidationReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.summary:
        parts = ", ".join(f"{key}={value}" for key, value in sorted(report.summary.items()))
        lines.append(f"[INFO] Validation summary: {parts}")
    status = "OK" if report.ok else "FAILED"
    lines.append(f"[INFO] Validation status: {status}")
    return lines


def _format_code_list(values: list[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    shown = ", ".join(values[:limit])
    return f"{shown}, ... (+{len(values) - limit} more)"
