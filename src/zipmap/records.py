"""City record loading: tab-separated rows into typed City records."""

from __future__ import annotations

import csv
import logging
import math
import re
import statistics
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from .models import POSTAL_CODE_LENGTH, City, is_ascii_digits

REQUIRED_COLUMNS = ("name", "zip", "population", "gps")

_GPS_PATTERN = re.compile(r"^(?P<lat>.+?)°N (?P<lon>.+?)°E$")
_WHITESPACE = re.compile(r"\s+")

_LOGGER = logging.getLogger("zipmap.records")


class CityLoadError(ValueError):
    """Raised when the city dataset cannot be loaded as a whole."""


def read_rows(path: Path) -> list[dict[str, str]]:
    """Read the raw tab-separated rows of the city file, keyed by header."""
    if not path.exists():
        raise CityLoadError(f"City data file not found: {path}")
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as fh:
            reader = csv.DictReader(fh, delimiter="\t")
            columns = [col.strip() for col in (reader.fieldnames or [])]
            missing = [col for col in REQUIRED_COLUMNS if col not in columns]
            if missing:
                raise CityLoadError(
                    f"Missing required column(s) in {path}: {', '.join(missing)}"
                )
            rows: list[dict[str, str]] = []
            for raw in reader:
                rows.append(
                    {
                        str(key).strip(): (value if isinstance(value, str) else "")
                        for key, value in raw.items()
                        if key is not None
                    }
                )
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise CityLoadError(f"Failed reading city data file '{path}': {exc}") from exc
    return rows


def parse_rows(rows: Iterable[Mapping[str, str]]) -> tuple[City, ...]:
    """Convert raw field maps into City records, preserving row order.

    Any malformed row aborts the whole load with CityLoadError.
    """
    cities: list[City] = []
    for idx, row in enumerate(rows, start=1):
        try:
            cities.append(parse_row(row))
        except ValueError as exc:
            raise CityLoadError(f"Row {idx}: {exc}") from exc
    return tuple(cities)


def parse_row(row: Mapping[str, str]) -> City:
    name = (row.get("name") or "").strip()
    postal_code = _strip_whitespace(row.get("zip"))
    if not postal_code:
        raise ValueError("empty 'zip' field")
    if len(postal_code) != POSTAL_CODE_LENGTH or not is_ascii_digits(postal_code):
        raise ValueError(f"'zip' must be {POSTAL_CODE_LENGTH} digits, got {row.get('zip')!r}")

    population_raw = _strip_whitespace(row.get("population"))
    if not population_raw:
        raise ValueError("empty 'population' field")
    if not is_ascii_digits(population_raw):
        raise ValueError(f"'population' is not an integer: {row.get('population')!r}")

    latitude, longitude = parse_gps(row.get("gps") or "")
    return City(
        name=name,
        postal_code=postal_code,
        population=int(population_raw),
        latitude=latitude,
        longitude=longitude,
    )


def parse_gps(value: str) -> tuple[float, float]:
    """Parse ``"<lat>°N <lon>°E"`` into (latitude, longitude) degrees."""
    match = _GPS_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f"'gps' does not match '<lat>°N <lon>°E': {value!r}")
    latitude = _parse_degrees(match.group("lat"), "latitude")
    longitude = _parse_degrees(match.group("lon"), "longitude")
    return (latitude, longitude)


def load_cities(path: Path) -> tuple[City, ...]:
    cities = parse_rows(read_rows(path))
    _LOGGER.info("Loaded %d cities from %s", len(cities), path)
    return cities


def population_extent(cities: Sequence[City]) -> tuple[int, int]:
    if not cities:
        raise ValueError("population extent of an empty city set")
    populations = [city.population for city in cities]
    return (min(populations), max(populations))


def median_center(cities: Sequence[City]) -> tuple[float, float]:
    """Median (longitude, latitude) of the dataset."""
    if not cities:
        raise ValueError("median center of an empty city set")
    lon = statistics.median(city.longitude for city in cities)
    lat = statistics.median(city.latitude for city in cities)
    return (float(lon), float(lat))


def _parse_degrees(raw: str, field_name: str) -> float:
    text = _strip_whitespace(raw)
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"invalid {field_name} in 'gps': {raw!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"invalid {field_name} in 'gps': {raw!r}")
    return value


def _strip_whitespace(value: str | None) -> str:
    return _WHITESPACE.sub("", value or "")
