"""
Dashboard configuration
=======================

One dataclass with every knob the dashboard uses. The CLI builds it from
command-line flags; tests build it directly with smaller values.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

# Column candidates, tried in order (matching ignores case and punctuation).
ATHLETE_COUNTRY_COLUMNS: Tuple[str, ...] = ("country", "country_long", "Country", "NOC")
ATHLETE_SPORT_COLUMNS: Tuple[str, ...] = ("disciplines", "discipline", "sport", "Sport")
MEDAL_COUNTRY_COLUMNS: Tuple[str, ...] = ("country_long", "country", "Country", "Team")
MEDAL_SPORT_COLUMNS: Tuple[str, ...] = ("discipline", "disciplines", "sport", "Sport")
MEDAL_DATE_COLUMNS: Tuple[str, ...] = ("medal_date", "date", "Date")

@dataclass
class DashboardConfig:
    """High-level knobs for loading, ranking, replay timing and chart sizes."""
    # How many bars the race chart shows per date
    top_k: int = 10

    # Replay cadence in milliseconds (one snapshot per tick)
    tick_ms: int = 2000

    # Country drawn first in the bar chart; the rest follow alphabetically
    pinned_country: str = "United States"

    # Chart sizes in pixels (converted to inches at `dpi`)
    chart_width: int = 1000
    chart_height: int = 500
    dpi: int = 100

    # Sankey height grows with the number of nodes
    sankey_min_height: int = 600
    sankey_node_height: int = 40

    # Race chart (bars + final table)
    race_height: int = 600

    athlete_country_columns: Tuple[str, ...] = field(default=ATHLETE_COUNTRY_COLUMNS)
    athlete_sport_columns: Tuple[str, ...] = field(default=ATHLETE_SPORT_COLUMNS)
    medal_country_columns: Tuple[str, ...] = field(default=MEDAL_COUNTRY_COLUMNS)
    medal_sport_columns: Tuple[str, ...] = field(default=MEDAL_SPORT_COLUMNS)
    medal_date_columns: Tuple[str, ...] = field(default=MEDAL_DATE_COLUMNS)

    def __post_init__(self) -> None:
        if self.top_k < 1:
            raise ValueError("top_k must be >= 1")
        if self.tick_ms <= 0:
            raise ValueError("tick_ms must be > 0")

    @property
    def tick_seconds(self) -> float:
        return self.tick_ms / 1000.0
