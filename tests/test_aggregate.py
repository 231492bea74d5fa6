"""Unit tests for grouping/counting helpers."""

from __future__ import annotations

import pytest

from omdash.aggregate import (
    MissingDataError,
    bar_scales,
    breakdown,
    country_profiles,
    final_totals,
    group_counts,
    sankey_flows,
    sorted_totals,
)
from omdash.models import SankeyLink

from conftest import make_records

pytestmark = pytest.mark.unit


def test_group_counts_keeps_first_seen_order(athletes) -> None:
    """Countries and their sports should appear in first-encounter order."""

    agg = group_counts(athletes)
    assert list(agg) == ["France", "United States", "Kenya", "Brazil"]
    assert agg["France"] == [("Judo", 2), ("Fencing", 1)]
    assert agg["United States"] == [("Swimming", 1), ("Athletics", 1)]


def test_group_counts_empty_input() -> None:
    """No records means an empty aggregate."""

    assert group_counts([]) == {}
    assert final_totals([]) == {}


def test_counts_per_country_match_record_counts(athletes) -> None:
    """Summed sport counts per country equal that country's record count."""

    agg = group_counts(athletes)
    totals = final_totals(athletes)
    for country, cats in agg.items():
        assert sum(n for _, n in cats) == totals[country]
        assert totals[country] == sum(1 for r in athletes if r.country == country)


def test_sorted_totals_ties_keep_first_seen_order() -> None:
    """Equal totals should stay in first-seen order."""

    totals = {"Kenya": 1, "France": 2, "Brazil": 1}
    assert sorted_totals(totals) == [("France", 2), ("Kenya", 1), ("Brazil", 1)]


def test_country_profiles_pin_then_alphabetical(athletes) -> None:
    """The pinned country leads; the rest are sorted by name."""

    profiles = country_profiles(group_counts(athletes), pinned="United States")
    assert [p.country for p in profiles] == ["United States", "Brazil", "France", "Kenya"]
    france = profiles[2]
    assert france.total == 3
    assert france.share("Judo") == pytest.approx(66.666, rel=1e-3)
    assert france.share("Rowing") == 0.0


def test_bar_scales(athletes) -> None:
    """Scales use the widest country and the tallest single sport."""

    profiles = country_profiles(group_counts(athletes))
    assert bar_scales(profiles) == (2, 2)
    assert bar_scales([]) == (0, 0)


def test_breakdown_percentages_round_to_two_places(athletes) -> None:
    """Each sport row carries its share of the country's athletes."""

    rows = breakdown(group_counts(athletes), "France")
    assert rows == [("Judo", 2, 66.67), ("Fencing", 1, 33.33)]


def test_breakdown_unknown_country_raises() -> None:
    """Missing countries surface as MissingDataError (a KeyError)."""

    with pytest.raises(MissingDataError):
        breakdown({}, "Atlantis")
    with pytest.raises(KeyError):
        breakdown({}, "Atlantis")


def test_sankey_flows_single_country(athletes) -> None:
    """A country becomes node 0, each sport a target node."""

    data = sankey_flows(group_counts(athletes), ["France"])
    assert data.nodes == ["France", "Judo", "Fencing"]
    assert data.links == [SankeyLink(0, 1, 2), SankeyLink(0, 2, 1)]


def test_sankey_flows_accumulates_repeated_links() -> None:
    """The same (country, sport) pair listed twice merges into one link."""

    agg = {"France": [("Judo", 2), ("Judo", 3)]}
    data = sankey_flows(agg, ["France"])
    assert data.links == [SankeyLink(0, 1, 5)]


def test_sankey_flows_country_without_sports_has_no_links() -> None:
    """An empty grouping degrades to a lone node."""

    data = sankey_flows({"Tuvalu": []}, ["Tuvalu"])
    assert data.nodes == ["Tuvalu"]
    assert data.links == []


def test_sankey_flows_skips_unknown_country(caplog) -> None:
    """Unknown countries are logged and produce nothing."""

    agg = {"France": [("Judo", 1)]}
    data = sankey_flows(agg, ["Atlantis"])
    assert data.is_empty()
    assert "No data found for country: Atlantis" in caplog.text


def test_sankey_flows_drops_zero_links() -> None:
    """Zero-value links never reach the layout."""

    data = sankey_flows({"France": [("Judo", 0), ("Fencing", 2)]}, ["France"])
    assert [l.value for l in data.links] == [2]


def test_make_records_helper_assigns_positions() -> None:
    """Sanity check for the shared fixture helper."""

    recs = make_records([("A", "x", "d1"), ("B", "y", "d2")])
    assert [r.record_id for r in recs] == [0, 1]
