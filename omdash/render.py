"""
Chart rendering (matplotlib)
============================

Draws the three dashboard charts from already-aggregated data:
- grouped bar chart: athletes per sport, one group per country
- Sankey diagram: one country flowing into its sports
- race chart: top-k medal totals for one replay date (+ final table)

Every chart instance owns a `ChartState` (size + colour assignment); no
module-level state is shared between charts. Figures are built with
`matplotlib.figure.Figure` directly, so nothing is registered with pyplot.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging
import os
import numpy as np
from matplotlib import colormaps
from matplotlib.figure import Figure
from matplotlib.patches import PathPatch, Rectangle
from matplotlib.path import Path
from .aggregate import bar_scales
from .events import SelectionChannel
from .models import CountryProfile, SankeyData, Snapshot

logger = logging.getLogger(__name__)

# Agg cannot rasterize more than 2**16 pixels per side; stay well below.
MAX_FIGURE_PX = 30000

@dataclass
class ChartState:
    """Size and colour assignment of one chart instance."""
    width: int = 1000
    height: int = 500
    dpi: int = 100
    palette: str = "tab10"
    colors: Dict[str, Tuple[float, ...]] = field(default_factory=dict)

    def color_for(self, key: str) -> Tuple[float, ...]:
        """Ordinal colour scale: a key keeps its colour for the chart's lifetime."""
        if key not in self.colors:
            pool = colormaps[self.palette].colors
            self.colors[key] = tuple(pool[len(self.colors) % len(pool)])
        return self.colors[key]

    def figure(self, width: Optional[int] = None, height: Optional[int] = None) -> Figure:
        w, h = width or self.width, height or self.height
        if max(w, h) > MAX_FIGURE_PX:
            logger.info("figure %dx%d px capped at %d px", w, h, MAX_FIGURE_PX)
        w, h = min(w, MAX_FIGURE_PX), min(h, MAX_FIGURE_PX)
        return Figure(figsize=(w / self.dpi, h / self.dpi), dpi=self.dpi)

def save_figure(fig: Figure, path: str) -> str:
    """Write a figure to disk (PNG, SVG, ... picked from the extension)."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=fig.dpi)
    return path

# -----------------------------
# Grouped bar chart
# -----------------------------

def render_bar_chart(profiles: Sequence[CountryProfile], state: ChartState,
                     title: str = "Athletes distribution per Country with respect to sports") -> Figure:
    """One grey band per country with a bar per sport inside it.

    Grey bands carry the country name as `gid` and are pickable, so
    `bind_selection` can turn clicks into selection events.
    """
    max_sports, max_count = bar_scales(profiles)
    country_px = 60 + max_sports * 20
    fig = state.figure(width=max(state.width, len(profiles) * country_px))
    ax = fig.add_subplot(1, 1, 1)
    ax.set_title(title)

    band = 0.7
    bar_w = band / max_sports if max_sports else band
    x = np.arange(len(profiles))
    for i, p in enumerate(profiles):
        bg = Rectangle((x[i] - band / 2, 0), band, max(max_count, 1) * 1.1,
                       facecolor="#f0f0f0", edgecolor="none", zorder=0, picker=True)
        bg.set_gid(p.country)
        ax.add_patch(bg)
        for j, s in enumerate(p.sports):
            ax.bar(x[i] - band / 2 + (j + 0.5) * bar_w, s.count, width=bar_w * 0.9,
                   color=state.color_for(s.category), zorder=1)

    ax.set_xticks(x)
    ax.set_xticklabels([p.country for p in profiles], rotation=45, ha="right")
    ax.set_xlim(-0.5, max(len(profiles), 1) - 0.5)
    ax.set_ylim(0, max(max_count, 1) * 1.1)
    ax.set_xlabel("Countries")
    ax.set_ylabel("Athletes")
    return fig

def selection_handler(channel: SelectionChannel) -> Callable[[object], None]:
    """Build a matplotlib `pick_event` handler that publishes the picked country."""
    def _on_pick(event) -> None:
        country = event.artist.get_gid() if getattr(event, "artist", None) is not None else None
        if country:
            channel.select(country)
    return _on_pick

def bind_selection(fig: Figure, channel: SelectionChannel) -> int:
    """Connect clicks on country bands to `channel`; returns the connection id."""
    return fig.canvas.mpl_connect("pick_event", selection_handler(channel))

# -----------------------------
# Sankey diagram
# -----------------------------

@dataclass
class NodeBox:
    name: str
    x0: float
    x1: float
    y0: float
    y1: float
    left: bool

def sankey_height(data: SankeyData, min_height: int = 600, node_height: int = 40) -> int:
    return max(min_height, len(data.nodes) * node_height)

def layout_sankey(data: SankeyData, width: float, height: float,
                  node_width: float = 20, node_padding: float = 10,
                  margin: Tuple[float, float, float, float] = (30, 20, 20, 20)) -> Tuple[List[NodeBox], List[Tuple[int, int, float, float, float, float]]]:
    """Two-column layout: sources left, targets right.

    Returns node boxes and link bands `(source, target, sy0, sy1, ty0, ty1)`.
    `margin` is (left, right, top, bottom) in pixels.
    """
    left, right, top, bottom = margin
    n = len(data.nodes)
    out_v = [0] * n
    in_v = [0] * n
    for l in data.links:
        out_v[l.source] += l.value
        in_v[l.target] += l.value
    is_left = [in_v[i] == 0 for i in range(n)]
    value = [max(out_v[i], in_v[i]) for i in range(n)]

    columns = [[i for i in range(n) if is_left[i]], [i for i in range(n) if not is_left[i]]]
    avail = height - top - bottom
    ky = 0.0
    scales = [(avail - node_padding * (len(col) - 1)) / sum(value[i] for i in col)
              for col in columns if col and sum(value[i] for i in col) > 0]
    if scales:
        ky = max(0.0, min(scales))

    boxes: List[Optional[NodeBox]] = [None] * n
    for side, col in enumerate(columns):
        x0 = left if side == 0 else width - right - node_width
        y = top
        for i in col:
            h = max(value[i] * ky, 1.0)
            boxes[i] = NodeBox(data.nodes[i], x0, x0 + node_width, y, y + h, side == 0)
            y += h + node_padding

    out_cursor = [b.y0 for b in boxes]
    in_cursor = [b.y0 for b in boxes]
    bands = []
    for l in data.links:
        dy = l.value * ky
        sy0 = out_cursor[l.source]; out_cursor[l.source] += dy
        ty0 = in_cursor[l.target]; in_cursor[l.target] += dy
        bands.append((l.source, l.target, sy0, sy0 + dy, ty0, ty0 + dy))
    return [b for b in boxes if b is not None], bands

def _band_path(xs: float, xt: float, sy0: float, sy1: float, ty0: float, ty1: float) -> Path:
    xm = (xs + xt) / 2
    verts = [
        (xs, sy0), (xm, sy0), (xm, ty0), (xt, ty0),
        (xt, ty1),
        (xm, ty1), (xm, sy1), (xs, sy1),
        (xs, sy0),
    ]
    codes = [Path.MOVETO, Path.CURVE4, Path.CURVE4, Path.CURVE4,
             Path.LINETO,
             Path.CURVE4, Path.CURVE4, Path.CURVE4,
             Path.CLOSEPOLY]
    return Path(verts, codes)

def render_sankey(data: SankeyData, state: ChartState, min_height: int = 600, node_height: int = 40,
                  title: str = "Athletes sport volume per Country") -> Figure:
    """Draw a Sankey diagram; an empty `data` yields a placeholder figure."""
    height = sankey_height(data, min_height, node_height)
    fig = state.figure(height=height)
    ax = fig.add_subplot(1, 1, 1)
    ax.set_title(title)
    ax.set_axis_off()
    width = min(state.width, MAX_FIGURE_PX)
    height = min(height, MAX_FIGURE_PX)
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)

    if data.is_empty():
        ax.text(width / 2, height / 2, "Select a country to see its sports", ha="center", va="center")
        return fig

    boxes, bands = layout_sankey(data, width, height)
    by_name = {b.name: b for b in boxes}
    for src, tgt, sy0, sy1, ty0, ty1 in bands:
        s = by_name[data.nodes[src]]
        t = by_name[data.nodes[tgt]]
        ax.add_patch(PathPatch(_band_path(s.x1, t.x0, sy0, sy1, ty0, ty1),
                               facecolor=state.color_for(s.name), edgecolor="none", alpha=0.5))
    for b in boxes:
        ax.add_patch(Rectangle((b.x0, b.y0), b.x1 - b.x0, b.y1 - b.y0, facecolor=state.color_for(b.name)))
        if b.left:
            ax.text(b.x1 + 6, (b.y0 + b.y1) / 2, b.name, ha="left", va="center")
        else:
            ax.text(b.x0 - 6, (b.y0 + b.y1) / 2, b.name, ha="right", va="center")
    return fig

# -----------------------------
# Race chart
# -----------------------------

class RaceChart:
    """Horizontal top-k bars for one date, plus the final medal table.

    The chart keeps its own figure and colours; `clear()` resets the bars
    and hides the table (what a restart does).
    """

    def __init__(self, state: Optional[ChartState] = None,
                 title: str = "Medals won animation by country") -> None:
        self.state = state or ChartState(width=1000, height=600)
        self.title = title
        self.fig = self.state.figure()
        grid = self.fig.add_gridspec(1, 10)
        self.ax = self.fig.add_subplot(grid[0, :7])
        self.table_ax = self.fig.add_subplot(grid[0, 7:])
        self.current: Optional[Snapshot] = None
        self.final_rows: List[Tuple[str, int]] = []
        self.clear()

    @property
    def table_visible(self) -> bool:
        return self.table_ax.get_visible()

    def clear(self) -> None:
        self.ax.clear()
        self.ax.set_title(self.title)
        self.table_ax.clear()
        self.table_ax.set_axis_off()
        self.table_ax.set_visible(False)
        self.current = None
        self.final_rows = []

    def draw(self, snap: Snapshot) -> None:
        self.current = snap
        ax = self.ax
        ax.clear()
        countries = [e.country for e in snap.entries]
        totals = [e.total for e in snap.entries]
        y = np.arange(len(countries))
        ax.barh(y, totals, color=[self.state.color_for(c) for c in countries])
        ax.set_yticks(y)
        ax.set_yticklabels(countries)
        ax.invert_yaxis()
        top = max(totals, default=0) or 1
        ax.set_xlim(0, top * 1.1)
        for yi, t in zip(y, totals):
            ax.text(t + top * 0.01, yi, str(t), va="center")
        ax.set_title(f"Date: {snap.date}")

    def show_final_table(self, rows: Sequence[Tuple[str, int]]) -> None:
        self.final_rows = list(rows)
        self.table_ax.clear()
        self.table_ax.set_axis_off()
        self.table_ax.set_title("Total Medals by Country")
        if rows:
            self.table_ax.table(cellText=[[c, str(n)] for c, n in rows],
                                colLabels=["Country", "Total Medals"], loc="upper center")
        self.table_ax.set_visible(True)

    def save(self, path: str) -> str:
        return save_figure(self.fig, path)
