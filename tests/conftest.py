"""Shared fixtures for zipmap tests."""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from zipmap.config import AppConfig  # noqa: E402
from zipmap.models import City  # noqa: E402

REPO_ROOT = Path(__file__).resolve().parents[1]

TSV_HEADER = "name\tzip\tpopulation\tgps\n"


def write_tsv(path: Path, rows: list[tuple[str, str, str, str]]) -> Path:
    lines = [TSV_HEADER]
    lines.extend("\t".join(row) + "\n" for row in rows)
    path.write_text("".join(lines), encoding="utf-8")
    return path


@pytest.fixture
def cities():
    return (
        City("Bratislava", "81101", 475503, 48.1486, 17.1077),
        City("Košice", "04001", 228249, 48.7164, 21.2611),
        City("Žilina", "01001", 80978, 49.2231, 18.7394),
        City("Nitra", "94901", 76533, 48.3069, 18.0864),
        City("Banská Štiavnica", "96901", 9991, 48.4585, 18.8931),
    )


@pytest.fixture
def data_file(tmp_path):
    return write_tsv(
        tmp_path / "cities.tsv",
        [
            ("Bratislava", "811 01", "475 503", "48.1486°N 17.1077°E"),
            ("Košice", "040 01", "228 249", "48.7164°N 21.2611°E"),
            ("Žilina", "010 01", "80 978", "49.2231°N 18.7394°E"),
            ("Nitra", "949 01", "76 533", "48.3069°N 18.0864°E"),
            ("Banská Štiavnica", "969 01", "9 991", "48.4585°N 18.8931°E"),
        ],
    )


@pytest.fixture
def cfg(data_file, tmp_path):
    return AppConfig.default(data_file, tmp_path / "build")
