"""Interactive map application: wiring of state, reconciler, canvas and UI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

from .canvas import MatplotlibCanvas, draw_pass, prepare_axes
from .colors import ColorPalette
from .config import AppConfig
from .interaction import InteractionDispatcher
from .models import City, MarkerAttributes, ViewState, ZoomDelta
from .reconcile import Reconciler, RenderPass
from .records import CityLoadError, load_cities
from .scales import MapGeometry, RadiusScale
from .state import ViewStateController

_LOGGER = logging.getLogger("zipmap.app")

_SIZE_LABEL = "Size by population"
_COLOR_LABEL = "Color by match"
_CONTROLS_HEIGHT_PX = 70


@dataclass(frozen=True, slots=True)
class MapData:
    """Loaded dataset; empty when loading failed."""

    cities: tuple[City, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class _DragState:
    active: bool = False
    last: tuple[float, float] = (0.0, 0.0)


def load_map_data(cfg: AppConfig) -> MapData:
    """Load the city file; a failure leaves the map empty instead of partial."""
    try:
        cities = load_cities(cfg.paths.data_file)
    except CityLoadError as exc:
        _LOGGER.error("City data load failed: %s", exc)
        return MapData(cities=(), error=str(exc))
    return MapData(cities=cities)


def build_reconciler(cfg: AppConfig, cities: Sequence[City]) -> Reconciler:
    geometry = MapGeometry.from_cities(
        cities,
        width=cfg.figure.width_px,
        height=cfg.figure.height_px,
        padding=cfg.figure.padding_px,
    )
    radius_scale = RadiusScale.for_cities(
        cities,
        min_radius=cfg.scale.min_radius,
        max_radius=cfg.scale.max_radius,
    )
    return Reconciler(
        geometry,
        radius_scale,
        palette=ColorPalette.from_config(cfg.colors),
        fixed_radius=cfg.scale.fixed_radius,
        duration_ms=cfg.transition.duration_ms,
    )


class MapApp:
    """One running visualization bound to a matplotlib map Axes."""

    def __init__(
        self,
        cfg: AppConfig,
        cities: Sequence[City],
        ax: Any,
        *,
        animate: bool,
        initial: ViewState | None = None,
    ) -> None:
        self.cfg = cfg
        self.cities = tuple(cities)
        self.ax = ax
        prepare_axes(
            ax,
            width=cfg.figure.width_px,
            height=cfg.figure.height_px,
            background=cfg.figure.background,
        )
        self.canvas = MatplotlibCanvas(
            ax,
            animate=animate,
            frame_interval_ms=cfg.transition.frame_interval_ms,
            highlight_color=cfg.colors.highlight,
        )
        self.controller = ViewStateController(
            min_scale=cfg.zoom.min_scale,
            max_scale=cfg.zoom.max_scale,
            origin=(cfg.figure.width_px / 2.0, cfg.figure.height_px / 2.0),
            initial=initial,
        )
        self.reconciler = build_reconciler(cfg, self.cities) if self.cities else None
        self.dispatcher = InteractionDispatcher(
            self.controller,
            self.canvas,
            self.cities,
            thousands_separator=cfg.tooltip.thousands_separator,
        )
        self.last_pass: RenderPass | None = None
        self._drag = _DragState()
        self._widgets: list[Any] = []
        self._reverting_filter = False
        self.controller.bind(self._on_state_change)

    @property
    def markers(self) -> dict[str, MarkerAttributes]:
        if self.last_pass is None:
            return {}
        return dict(self.last_pass.markers)

    def render(self) -> RenderPass | None:
        if self.reconciler is None:
            return None
        render_pass = self.reconciler.render(self.cities, self.controller.state)
        draw_pass(self.canvas, render_pass)
        self.last_pass = render_pass
        self.dispatcher.refresh(render_pass.markers)
        return render_pass

    def _on_state_change(self, _state: ViewState) -> None:
        self.render()

    # -- UI wiring ---------------------------------------------------------

    def connect(self, fig: Any, *, controls_ax: tuple[Any, Any] | None = None) -> None:
        """Hook pointer, scroll and key events; build widgets when axes are given."""
        fig.canvas.mpl_connect("motion_notify_event", self._on_motion)
        fig.canvas.mpl_connect("button_press_event", self._on_press)
        fig.canvas.mpl_connect("button_release_event", self._on_release)
        fig.canvas.mpl_connect("scroll_event", self._on_scroll)
        fig.canvas.mpl_connect("key_press_event", self._on_key)
        if controls_ax is not None:
            self._build_widgets(*controls_ax)

    def _build_widgets(self, check_ax: Any, text_ax: Any) -> None:
        check_buttons_cls, text_box_cls = _require_widgets()
        state = self.controller.state
        checks = check_buttons_cls(
            check_ax,
            [_SIZE_LABEL, _COLOR_LABEL],
            [state.size_by_population, state.color_by_match],
        )
        checks.on_clicked(self._on_toggle)
        text_box = text_box_cls(text_ax, "ZIP prefix ", initial=state.filter_text)
        text_box.on_text_change(lambda text: self._on_filter_text(text_box, text))
        self._widgets.extend([checks, text_box])

    def _on_toggle(self, label: str | None) -> None:
        state = self.controller.state
        if label == _SIZE_LABEL:
            self.controller.set_size_by_population(not state.size_by_population)
        elif label == _COLOR_LABEL:
            self.controller.set_color_by_match(not state.color_by_match)

    def _on_filter_text(self, text_box: Any, text: str) -> None:
        if self._reverting_filter:
            return
        if self.controller.set_filter_text(text):
            return
        self._reverting_filter = True
        try:
            text_box.set_val(self.controller.state.filter_text)
        finally:
            self._reverting_filter = False

    def _on_motion(self, event: Any) -> None:
        if event.inaxes is not self.ax or event.xdata is None or event.ydata is None:
            self.dispatcher.pointer_moved(None, None, {})
            return
        if self._drag.active:
            last_x, last_y = self._drag.last
            self._drag.last = (event.xdata, event.ydata)
            self.dispatcher.zoom_gesture(
                ZoomDelta(dx=event.xdata - last_x, dy=event.ydata - last_y)
            )
            return
        self.dispatcher.pointer_moved(event.xdata, event.ydata, self.canvas.drawn_markers())

    def _on_press(self, event: Any) -> None:
        if event.inaxes is self.ax and event.button == 1 and event.xdata is not None:
            self._drag.active = True
            self._drag.last = (event.xdata, event.ydata)

    def _on_release(self, event: Any) -> None:
        self._drag.active = False

    def _on_scroll(self, event: Any) -> None:
        if event.inaxes is not self.ax or event.xdata is None:
            return
        step = self.cfg.zoom.wheel_step
        factor = step if event.button == "up" else 1.0 / step
        self.dispatcher.zoom_gesture(ZoomDelta(factor=factor, anchor=(event.xdata, event.ydata)))

    def _on_key(self, event: Any) -> None:
        if event.key == "r":
            self.dispatcher.hover_exit()
            self.controller.reset_zoom()


def show_interactive(cfg: AppConfig, *, initial: ViewState | None = None) -> MapData:
    """Open the interactive window; blocks until it is closed."""
    plt = _require_pyplot()
    data = load_map_data(cfg)
    fig_cfg = cfg.figure
    total_h = fig_cfg.height_px + _CONTROLS_HEIGHT_PX
    fig = plt.figure(figsize=(fig_cfg.width_px / fig_cfg.dpi, total_h / fig_cfg.dpi), dpi=fig_cfg.dpi)
    ctrl_frac = _CONTROLS_HEIGHT_PX / total_h
    map_ax = fig.add_axes((0.0, ctrl_frac, 1.0, 1.0 - ctrl_frac))
    check_ax = fig.add_axes((0.02, 0.01, 0.30, ctrl_frac * 0.9))
    text_ax = fig.add_axes((0.55, ctrl_frac * 0.3, 0.15, ctrl_frac * 0.4))
    try:
        fig.canvas.manager.set_window_title("Slovak cities by postal code")
    except AttributeError:
        pass

    app = MapApp(cfg, data.cities, map_ax, animate=True, initial=initial)
    app.connect(fig, controls_ax=(check_ax, text_ax))
    app.render()
    plt.show()
    return data


def render_png(
    cfg: AppConfig,
    cities: Sequence[City],
    output_path: Path,
    *,
    initial: ViewState | None = None,
) -> Path:
    """Render one static frame of the map to an image file."""
    figure_cls = _require_figure()
    fig_cfg = cfg.figure
    fig = figure_cls(figsize=(fig_cfg.width_px / fig_cfg.dpi, fig_cfg.height_px / fig_cfg.dpi), dpi=fig_cfg.dpi)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    app = MapApp(cfg, cities, ax, animate=False, initial=initial)
    app.render()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=fig_cfg.dpi, facecolor=fig_cfg.background)
    _LOGGER.info("Map image written to %s", output_path)
    return output_path


@lru_cache(maxsize=1)
def _require_pyplot() -> Any:
    try:
        import matplotlib.pyplot as plt
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for the interactive map") from exc
    return plt


@lru_cache(maxsize=1)
def _require_figure() -> Any:
    try:
        from matplotlib.figure import Figure
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for map rendering") from exc
    return Figure


@lru_cache(maxsize=1)
def _require_widgets() -> tuple[Any, Any]:
    try:
        from matplotlib.widgets import CheckButtons, TextBox
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for map controls") from exc
    return (CheckButtons, TextBox)
