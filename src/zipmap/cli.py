"""CLI entrypoint for the zipmap city map."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .app import build_reconciler, render_png, show_interactive
from .config import AppConfig, load_config
from .models import ViewState, ZoomTransform
from .records import CityLoadError, load_cities
from .state import ViewStateController, is_valid_filter
from .util import ensure_directories, setup_logging, write_json
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("zipmap.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zipmap",
        description="Interactive postal-code map of Slovak cities.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    def add_view(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--size-by-population",
            action="store_true",
            help="Scale markers by population.",
        )
        p.add_argument(
            "--color-by-match",
            action="store_true",
            help="Color matching markers by their next postal-code digit.",
        )
        p.add_argument(
            "--filter",
            default="",
            help="Postal-code prefix filter (0-5 digits).",
        )
        p.add_argument(
            "--zoom",
            type=float,
            default=1.0,
            help="Initial zoom scale; clamped to the configured range.",
        )

    show_p = subparsers.add_parser("show", help="Open the interactive map window.")
    add_common(show_p)
    add_view(show_p)

    render_p = subparsers.add_parser("render", help="Render a static map image.")
    add_common(render_p)
    add_view(render_p)
    render_p.add_argument(
        "--output",
        default=None,
        help="Output image path. Defaults to <output_dir>/map.png.",
    )

    markers_p = subparsers.add_parser(
        "markers",
        help="Write target marker attributes for one view state as JSON.",
    )
    add_common(markers_p)
    add_view(markers_p)
    markers_p.add_argument(
        "--output",
        default=None,
        help="Output JSON path. Defaults to <output_dir>/markers.json.",
    )

    validate_p = subparsers.add_parser("validate", help="Validate config and city data.")
    add_common(validate_p)

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    setup_logging(None, verbose=args.verbose)
    cfg = load_config(args.config)
    setup_logging(cfg.paths.logs_dir / "zipmap.log", verbose=args.verbose)
    ensure_directories(cfg.paths.build_directories)
    return cfg


def _initial_view_state(args: argparse.Namespace) -> ViewState:
    filter_text = str(args.filter)
    if not is_valid_filter(filter_text):
        raise ValueError(f"--filter must be empty or up to 5 digits, got {filter_text!r}")
    return ViewState(
        size_by_population=bool(args.size_by_population),
        color_by_match=bool(args.color_by_match),
        filter_text=filter_text,
        zoom=ZoomTransform(scale=float(args.zoom)),
    )


def _output_path(cfg: AppConfig, raw: str | None, default_name: str) -> Path:
    if raw:
        return Path(raw)
    return cfg.paths.output_dir / default_name


def _run_show(cfg: AppConfig, *, initial: ViewState) -> int:
    data = show_interactive(cfg, initial=initial)
    return 0 if data.ok else 1


def _run_render(cfg: AppConfig, *, initial: ViewState, output: Path) -> int:
    try:
        cities = load_cities(cfg.paths.data_file)
    except CityLoadError as exc:
        LOGGER.error("City data load failed: %s", exc)
        return 1
    if not cities:
        LOGGER.error("City data file has no rows: %s", cfg.paths.data_file)
        return 1
    render_png(cfg, cities, output, initial=initial)
    return 0


def _run_markers(cfg: AppConfig, *, initial: ViewState, output: Path) -> int:
    try:
        cities = load_cities(cfg.paths.data_file)
    except CityLoadError as exc:
        LOGGER.error("City data load failed: %s", exc)
        return 1
    if not cities:
        LOGGER.error("City data file has no rows: %s", cfg.paths.data_file)
        return 1
    state = ViewStateController(
        min_scale=cfg.zoom.min_scale,
        max_scale=cfg.zoom.max_scale,
        initial=initial,
    ).state
    reconciler = build_reconciler(cfg, cities)
    render_pass = reconciler.render(cities, state)
    payload = {
        "cities_total": len(cities),
        "view_state": state.to_dict(),
        **render_pass.to_dict(),
    }
    write_json(output, payload)
    LOGGER.info("Wrote %d marker targets to %s", len(render_pass.markers), output)
    return 0


def _run_validate(cfg: AppConfig) -> int:
    report = Validator(cfg).run()
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _dispatch(args: argparse.Namespace) -> int:
    try:
        cfg = _load_and_setup(args)
    except (FileNotFoundError, ValueError) as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 2
    command = str(args.command)
    if command == "validate":
        return _run_validate(cfg)

    try:
        initial = _initial_view_state(args)
    except ValueError as exc:
        LOGGER.error("%s", exc)
        return 2
    if command == "show":
        return _run_show(cfg, initial=initial)
    if command == "render":
        return _run_render(
            cfg,
            initial=initial,
            output=_output_path(cfg, args.output, "map.png"),
        )
    if command == "markers":
        return _run_markers(
            cfg,
            initial=initial,
            output=_output_path(cfg, args.output, "markers.json"),
        )
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
