"""
Data model
==========

Each input row (an athlete or a medal) becomes one `Record`.
Records are immutable (`frozen=True`) so aggregation and replay can only
*read* them; every derived structure is recomputed from the record list.

Derived shapes:
- `CategoryCount` / `CountryProfile`: grouped counts for the bar chart.
- `CumulativeObservation`: one step of the running medal scan.
- `RankedEntry` / `Snapshot`: the top-k standings at one date.
- `SankeyData`: nodes + links for one country.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

@dataclass(frozen=True)
class Record:
    """One observation: a country, a secondary category (sport) and a date.

    `date` is kept as a string; ISO dates sort correctly as text.
    """
    record_id: int
    country: str
    category: str
    date: str = ""

@dataclass(frozen=True)
class CategoryCount:
    category: str
    count: int

@dataclass(frozen=True)
class CountryProfile:
    """All sports of one country with athlete counts (one bar group)."""
    country: str
    sports: Tuple[CategoryCount, ...]
    total: int

    def share(self, category: str) -> float:
        """Percentage of the country's total that falls in `category`."""
        if not self.total:
            return 0.0
        for s in self.sports:
            if s.category == category:
                return s.count * 100.0 / self.total
        return 0.0

@dataclass(frozen=True)
class CumulativeObservation:
    """Running total of `country` right after the record at scan position `position`."""
    position: int
    date: str
    country: str
    running_total: int

@dataclass(frozen=True)
class RankedEntry:
    country: str
    total: int

@dataclass(frozen=True)
class Snapshot:
    """Top-k standings at one date of the replay."""
    index: int
    date: str
    entries: Tuple[RankedEntry, ...]

    def as_pairs(self) -> List[Tuple[str, int]]:
        return [(e.country, e.total) for e in self.entries]

@dataclass(frozen=True)
class SankeyLink:
    source: int
    target: int
    value: int

@dataclass
class SankeyData:
    """Node names plus index-based links, ready for layout."""
    nodes: List[str] = field(default_factory=list)
    links: List[SankeyLink] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.nodes
