"""Pytest fixtures shared across the OMDash tests."""

from __future__ import annotations

from pathlib import Path
from typing import List

import matplotlib
import pytest

matplotlib.use("Agg")

from omdash.models import Record  # noqa: E402


def make_records(rows) -> List[Record]:
    """Build Records from (country, category, date) tuples in scan order."""

    return [Record(record_id=i, country=c, category=cat, date=d) for i, (c, cat, d) in enumerate(rows)]


@pytest.fixture
def athletes() -> List[Record]:
    """Athletes for three countries; Kenya has a single sport."""

    return make_records([
        ("France", "Judo", ""),
        ("United States", "Swimming", ""),
        ("France", "Fencing", ""),
        ("France", "Judo", ""),
        ("Kenya", "Athletics", ""),
        ("United States", "Athletics", ""),
        ("Brazil", "Surfing", ""),
    ])


@pytest.fixture
def medals() -> List[Record]:
    """Medals listed in file order (not date order)."""

    return make_records([
        ("United States", "Swimming", "2024-07-28"),
        ("France", "Judo", "2024-07-27"),
        ("United States", "Athletics", "2024-07-29"),
        ("Kenya", "Athletics", "2024-07-28"),
        ("France", "Judo", "2024-07-29"),
        ("China", "Diving", "2024-07-27"),
        ("China", "Diving", "2024-07-29"),
    ])


@pytest.fixture
def athletes_csv(tmp_path: Path) -> Path:
    """A small athletes.csv with list-formatted discipline cells."""

    path = tmp_path / "athletes.csv"
    path.write_text(
        "name,country,disciplines\n"
        "A,France,['Judo']\n"
        "B,United States,['Swimming']\n"
        "C,France,\"['Judo', 'Wrestling']\"\n"
        "D,,['Rowing']\n"
        "E,Kenya,['Athletics']\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def medallists_csv(tmp_path: Path) -> Path:
    """A small medallists.csv (one row per medal)."""

    path = tmp_path / "medallists.csv"
    path.write_text(
        "medal_date,medal_type,country_long,discipline\n"
        "2024-07-28,Gold Medal,United States,Swimming\n"
        "2024-07-27,Silver Medal,France,Judo\n"
        "2024-07-28,Bronze Medal,France,Judo\n"
        "2024-07-29,Gold Medal,Kenya,Athletics\n",
        encoding="utf-8",
    )
    return path
