"""
Dashboard (wiring)
==================

This is where the pieces meet:

1) Athletes records -> aggregate -> country profiles (bar chart)
2) Bar chart selection -> `SelectionChannel` -> Sankey view recompute
3) Medal records -> `ReplaySequence` -> `ReplayPlayer` ticking on a clock
   -> race chart frames, then the final medal table

The dashboard holds no module-level state; two dashboards built from the
same files are fully independent.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import logging
from matplotlib.figure import Figure
from .aggregate import Aggregate, breakdown, country_profiles, group_counts, sankey_flows
from .clock import Clock
from .config import DashboardConfig
from .events import CountrySelected, SelectionChannel
from .models import CountryProfile, Record, SankeyData
from .player import ReplayPlayer
from .render import ChartState, RaceChart, bind_selection, render_bar_chart, render_sankey
from .replay import ReplaySequence

logger = logging.getLogger(__name__)

@dataclass
class SankeyView:
    """Sankey chart for the currently selected country.

    A selection replaces the previous country's data and figure entirely.
    Selecting a country missing from the aggregate is logged and ignored.
    """
    agg: Aggregate
    state: ChartState
    min_height: int = 600
    node_height: int = 40
    country: Optional[str] = None
    data: SankeyData = field(default_factory=SankeyData)
    figure: Optional[Figure] = None
    renders: int = 0

    def on_selected(self, event: CountrySelected) -> None:
        if event.country not in self.agg:
            logger.warning("No data found for country: %s", event.country)
            return
        self.country = event.country
        self.data = sankey_flows(self.agg, [event.country])
        self.figure = render_sankey(self.data, self.state, self.min_height, self.node_height)
        self.renders += 1

@dataclass
class Dashboard:
    """All three charts for one pair of data files."""
    athletes: List[Record]
    medals: List[Record]
    config: DashboardConfig = field(default_factory=DashboardConfig)
    clock: Clock = field(default_factory=Clock)
    channel: SelectionChannel = field(default_factory=SelectionChannel)
    # (athletes file, medallists file) when loaded from disk
    sources: Tuple[Optional[str], Optional[str]] = (None, None)

    agg: Aggregate = field(init=False)
    profiles: List[CountryProfile] = field(init=False)
    bar_state: ChartState = field(init=False)
    sankey: SankeyView = field(init=False)
    race: RaceChart = field(init=False)
    player: ReplayPlayer = field(init=False)

    def __post_init__(self) -> None:
        cfg = self.config
        self.agg = group_counts(self.athletes)
        self.profiles = country_profiles(self.agg, pinned=cfg.pinned_country)
        self.bar_state = ChartState(width=cfg.chart_width, height=cfg.chart_height, dpi=cfg.dpi)
        self.sankey = SankeyView(
            agg=self.agg,
            state=ChartState(width=cfg.chart_width, height=cfg.sankey_min_height, dpi=cfg.dpi),
            min_height=cfg.sankey_min_height,
            node_height=cfg.sankey_node_height,
        )
        self._unsubscribe = self.channel.subscribe(self.sankey.on_selected)
        self.race = RaceChart(ChartState(width=cfg.chart_width, height=cfg.race_height, dpi=cfg.dpi))
        self.player = ReplayPlayer(
            sequence=ReplaySequence.from_records(self.medals, k=cfg.top_k),
            clock=self.clock,
            tick_seconds=cfg.tick_seconds,
            on_snapshot=self.race.draw,
            on_finish=self.race.show_final_table,
            on_reset=self.race.clear,
        )

    # ---------------- Bar chart ----------------
    def bar_chart(self) -> Figure:
        """Grouped bar chart; clicking a country band selects it."""
        fig = render_bar_chart(self.profiles, self.bar_state)
        bind_selection(fig, self.channel)
        return fig

    def countries(self, prefix: str = "") -> List[str]:
        p = prefix.lower()
        return [c.country for c in self.profiles if c.country.lower().startswith(p)]

    def breakdown(self, country: str) -> List[Tuple[str, int, float]]:
        return breakdown(self.agg, country)

    # ---------------- Selection ----------------
    def select(self, country: str) -> None:
        self.channel.select(country)

    @property
    def selected(self) -> Optional[str]:
        return self.sankey.country

    # ---------------- Race ----------------
    def play(self) -> None:
        """(Re)start the race; frames arrive as the clock runs."""
        self.player.restart()

    def dates(self) -> List[str]:
        return self.player.sequence.dates()

    def standings(self, n: Optional[int] = None) -> List[Tuple[str, int]]:
        rows = self.player.final_table()
        return rows[:n] if n is not None else rows

    def close(self) -> None:
        self.player.cancel()
        self._unsubscribe()

def build_dashboard(athletes: Sequence[Record], medals: Sequence[Record],
                    config: Optional[DashboardConfig] = None, clock: Optional[Clock] = None) -> Dashboard:
    return Dashboard(
        athletes=list(athletes),
        medals=list(medals),
        config=config or DashboardConfig(),
        clock=clock or Clock(),
    )
