"""
Dataset loader (CSV/Excel -> Record list)
=========================================

This module reads the Olympic data files and converts each row into a
`Record` object.

Two sources are supported:
- athletes file: one row per athlete, `country` + `disciplines`
  (the discipline cell looks like "['Judo', 'Wrestling']").
- medallists file: one row per medal, `country_long` + `medal_date`
  (+ `discipline` when present).

Key ideas:
- Column names are matched tolerantly because exports vary.
- Rows keep their file order: the replay scan depends on encounter order.
- Any unreadable or malformed source raises `LoadError`; nothing is rendered.
"""

from __future__ import annotations
from typing import List, Optional, Sequence
import logging
import os
import re
import pandas as pd
from .config import DashboardConfig
from .models import Record

logger = logging.getLogger(__name__)

class LoadError(ValueError):
    """The data source could not be read or lacks a required column."""

_LIST_CHARS_RE = re.compile(r"[\[\]']+")

def _to_str(x) -> str:
    if pd.isna(x): return ""
    return str(x).strip()

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def clean_category(value) -> str:
    """Strip list punctuation from a discipline cell: "['Judo']" -> "Judo"."""
    return _LIST_CHARS_RE.sub("", _to_str(value)).strip()

def _col(df: pd.DataFrame, names: Sequence[str], required: bool = True) -> Optional[str]:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    if required:
        raise LoadError(f"Missing required column. Tried={tuple(names)}. Available={cols}")
    return None

def read_table(path: str) -> pd.DataFrame:
    """Read a CSV (or .xlsx) file into a DataFrame with stripped column names."""
    if not os.path.exists(path):
        raise LoadError(f"Data file not found: {path}")
    try:
        if path.lower().endswith((".xlsx", ".xlsm")):
            df = pd.read_excel(path, engine="openpyxl", dtype=str)
        else:
            df = pd.read_csv(path, dtype=str, keep_default_na=True)
    except (OSError, ValueError, pd.errors.ParserError) as e:
        raise LoadError(f"Could not read {path}: {e}") from e
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    logger.debug("read %d rows from %s", len(df), path)
    return df

def records_from_frame(
    df: pd.DataFrame,
    country_columns: Sequence[str],
    category_columns: Sequence[str],
    date_columns: Sequence[str] = (),
) -> List[Record]:
    """Convert a DataFrame into Records.

    Rows without a country are skipped. When `date_columns` is given the
    date is mandatory too: a medal without a date cannot be placed in the
    replay, so it is skipped rather than counted only in the final totals.
    """
    country_col = _col(df, country_columns)
    category_col = _col(df, category_columns, required=False)
    date_col = _col(df, date_columns) if date_columns else None

    records: List[Record] = []
    no_country = no_date = 0
    for _, row in df.iterrows():
        country = _to_str(row[country_col])
        if not country:
            no_country += 1
            continue
        date = _to_str(row[date_col]) if date_col else ""
        if date_col and not date:
            no_date += 1
            continue
        category = clean_category(row[category_col]) if category_col else ""
        records.append(Record(record_id=len(records), country=country, category=category, date=date))
    if no_country:
        logger.warning("skipped %d rows without a country", no_country)
    if no_date:
        logger.warning("skipped %d rows without a date", no_date)
    return records

def load_athletes(path: str, config: Optional[DashboardConfig] = None) -> List[Record]:
    """Load the athletes file: one Record per athlete (category = disciplines)."""
    config = config or DashboardConfig()
    df = read_table(path)
    return records_from_frame(df, config.athlete_country_columns, config.athlete_sport_columns)

def load_medallists(path: str, config: Optional[DashboardConfig] = None) -> List[Record]:
    """Load the medallists file: one Record per medal, tagged with its medal date."""
    config = config or DashboardConfig()
    df = read_table(path)
    return records_from_frame(
        df,
        config.medal_country_columns,
        config.medal_sport_columns,
        config.medal_date_columns,
    )
