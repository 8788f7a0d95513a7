"""Tests for the dataset validator."""

from dataclasses import replace

from conftest import write_tsv
from zipmap.config import ScaleConfig
from zipmap.validate import ValidationReport, Validator, format_report_lines


def test_valid_dataset_passes(cfg):
    report = Validator(cfg).run()
    assert report.ok
    assert report.warnings == []
    assert report.summary == {"cities_total": 5, "duplicate_postal_codes": 0}
    assert "Leading postal-code digits present: 0, 8, 9" in report.infos
    assert "Population range: 9991 .. 475503" in report.infos


def test_missing_file_is_an_error(cfg):
    cfg.paths.data_file.unlink()
    report = Validator(cfg).run()
    assert not report.ok
    assert "Failed loading city data" in report.errors[0]


def test_empty_file_is_an_error(cfg):
    write_tsv(cfg.paths.data_file, [])
    report = Validator(cfg).run()
    assert report.errors == [f"City data file has no rows: {cfg.paths.data_file}"]


def test_duplicates_and_zero_population_warn(cfg):
    write_tsv(
        cfg.paths.data_file,
        [
            ("Bratislava", "811 01", "475 503", "48.1486°N 17.1077°E"),
            ("Bratislava II", "811 01", "0", "48.15°N 17.11°E"),
        ],
    )
    report = Validator(cfg).run()
    assert report.ok
    assert report.summary["duplicate_postal_codes"] == 1
    assert any("81101" in msg for msg in report.warnings)
    assert any("Bratislava II" in msg for msg in report.warnings)


def test_flat_population_warns(cfg):
    write_tsv(
        cfg.paths.data_file,
        [
            ("A", "811 01", "100", "48.1°N 17.1°E"),
            ("B", "040 01", "100", "48.7°N 21.2°E"),
        ],
    )
    report = Validator(cfg).run()
    assert any("size-by-population is flat" in msg for msg in report.warnings)


def test_fixed_radius_above_max_warns(cfg):
    cfg = replace(cfg, scale=ScaleConfig(min_radius=2.0, max_radius=3.0, fixed_radius=4.0))
    report = Validator(cfg).run()
    assert any("fixed_radius" in msg for msg in report.warnings)


def test_format_report_lines():
    report = ValidationReport()
    report.add_info("hello")
    report.add_warning("careful")
    report.add_error("broken")
    report.summary["cities_total"] = 3
    lines = format_report_lines(report)
    assert lines == [
        "[INFO] hello",
        "[WARN] careful",
        "[ERROR] broken",
        "[INFO] Validation summary: cities_total=3",
        "[INFO] Validation status: FAILED",
    ]


def test_long_code_lists_are_truncated(cfg):
    rows = []
    for i in range(15):
        code = f"{i:03d} 01"
        rows.append((f"A{i}", code, "10", "48.1°N 17.1°E"))
        rows.append((f"B{i}", code, "20", "48.2°N 17.2°E"))
    write_tsv(cfg.paths.data_file, rows)
    report = Validator(cfg).run()
    duplicates = [msg for msg in report.warnings if msg.startswith("Duplicate")]
    assert duplicates[0].endswith("(+3 more)")
