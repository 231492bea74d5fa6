"""
Aggregation (grouping + counting)
=================================

Single-pass grouping helpers. Everything here is a pure function of the
record list: no caching, no mutation of the input.

Example:
- `group_counts(records)["France"]` gives `[("Judo", 12), ("Fencing", 9), ...]`
  with sports in the order they were first seen.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging
from .models import CategoryCount, CountryProfile, Record, SankeyData, SankeyLink

logger = logging.getLogger(__name__)

# country -> [(category, count), ...] in first-seen order
Aggregate = Dict[str, List[Tuple[str, int]]]

class MissingDataError(KeyError):
    """A requested country is not present in the aggregate."""

def group_counts(records: Iterable[Record]) -> Aggregate:
    """Group records by country, then by category, counting occurrences.

    Ties in category ordering keep insertion order (plain dicts preserve it).
    """
    nested: Dict[str, Dict[str, int]] = {}
    for r in records:
        by_cat = nested.setdefault(r.country, {})
        by_cat[r.category] = by_cat.get(r.category, 0) + 1
    return {country: list(cats.items()) for country, cats in nested.items()}

def final_totals(records: Iterable[Record]) -> Dict[str, int]:
    """country -> number of records, in first-seen country order."""
    totals: Dict[str, int] = {}
    for r in records:
        totals[r.country] = totals.get(r.country, 0) + 1
    return totals

def sorted_totals(totals: Dict[str, int]) -> List[Tuple[str, int]]:
    """Totals descending; equal totals keep first-seen order (sorted() is stable)."""
    return sorted(totals.items(), key=lambda kv: kv[1], reverse=True)

def country_profiles(agg: Aggregate, pinned: Optional[str] = None) -> List[CountryProfile]:
    """Build one `CountryProfile` per country, ordered for display.

    The `pinned` country (if present) comes first; the rest sort by name.
    """
    profiles = [
        CountryProfile(
            country=country,
            sports=tuple(CategoryCount(cat, n) for cat, n in cats),
            total=sum(n for _, n in cats),
        )
        for country, cats in agg.items()
    ]
    profiles.sort(key=lambda p: (p.country != pinned, p.country.casefold()))
    return profiles

def lookup(agg: Aggregate, country: str) -> List[Tuple[str, int]]:
    """Return the category counts of `country` or raise `MissingDataError`."""
    try:
        return agg[country]
    except KeyError:
        raise MissingDataError(country) from None

def breakdown(agg: Aggregate, country: str) -> List[Tuple[str, int, float]]:
    """Rows of (sport, athletes, percent of total) for one country.

    Percentages are rounded to 2 decimals, like the dashboard tooltip.
    """
    cats = lookup(agg, country)
    total = sum(n for _, n in cats)
    return [(cat, n, round(n * 100.0 / total, 2) if total else 0.0) for cat, n in cats]

def bar_scales(profiles: Sequence[CountryProfile]) -> Tuple[int, int]:
    """(max sports in one country, max athletes in one sport); (0, 0) when empty."""
    max_sports = max((len(p.sports) for p in profiles), default=0)
    max_count = max((s.count for p in profiles for s in p.sports), default=0)
    return max_sports, max_count

def sankey_flows(agg: Aggregate, countries: Sequence[str]) -> SankeyData:
    """Nodes + links for the given countries (the dashboard passes exactly one).

    Unknown countries are logged and skipped. A country without categories
    still becomes a node, just with no links. A repeated (country, sport)
    pair accumulates into one link; zero-value links are dropped.
    """
    data = SankeyData()
    index: Dict[str, int] = {}
    values: Dict[Tuple[int, int], int] = {}

    def _node(name: str) -> int:
        if name not in index:
            index[name] = len(data.nodes)
            data.nodes.append(name)
        return index[name]

    for country in countries:
        if country not in agg:
            logger.warning("No data found for country: %s", country)
            continue
        src = _node(country)
        for cat, n in agg[country]:
            dst = _node(cat)
            values[(src, dst)] = values.get((src, dst), 0) + n

    data.links = [SankeyLink(s, t, v) for (s, t), v in values.items() if v > 0]
    return data
