"""
Replay sequencer (medal race)
=============================

Turns a list of medal Records into a lazy, date-ordered sequence of top-k
snapshots.

How a snapshot is computed:
1) Scan records in file order, keeping a running total per country. Each
   record produces a `CumulativeObservation(date, country, running_total)`.
2) For a date D, keep the observations with `date <= D`. A country's value is
   the largest running total among them.
3) Rank descending by value. Equal values keep the order in which the
   countries first appear in the scan (among the kept observations).
4) Keep the first k.

Dates come from the data, so every snapshot date has at least one record.
Records without a date never reach a frame: `ReplaySequence.from_records`
drops them (with a warning) so the last frame and the final medal table are
built from the same records.
A date with nothing new for a country simply repeats that country's last
value because step 2 looks at the full history up to D.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import heapq
import logging
from .models import CumulativeObservation, RankedEntry, Record, Snapshot

logger = logging.getLogger(__name__)

def distinct_dates(records: Sequence[Record]) -> List[str]:
    """Distinct non-empty dates, ascending (ISO strings sort lexicographically)."""
    return sorted({r.date for r in records if r.date})

def cumulative_observations(records: Sequence[Record]) -> List[CumulativeObservation]:
    """One forward scan: increment the record's country, emit its running total."""
    running: Dict[str, int] = {}
    out: List[CumulativeObservation] = []
    for pos, r in enumerate(records):
        running[r.country] = running.get(r.country, 0) + 1
        out.append(CumulativeObservation(pos, r.date, r.country, running[r.country]))
    return out

def _rank(best: Dict[str, int], first_seen: Dict[str, int], k: int) -> Tuple[RankedEntry, ...]:
    # heapq.nsmallest(k, ...) == sorted(...)[:k], including tie order
    top = heapq.nsmallest(k, best.items(), key=lambda kv: (-kv[1], first_seen[kv[0]]))
    return tuple(RankedEntry(country, total) for country, total in top)

def snapshot_at(observations: Sequence[CumulativeObservation], date: str, k: int = 10, index: int = 0) -> Snapshot:
    """Top-k standings from every observation dated on or before `date`."""
    best: Dict[str, int] = {}
    first_seen: Dict[str, int] = {}
    for ob in observations:
        if not ob.date or ob.date > date:
            continue
        if ob.running_total > best.get(ob.country, -1):
            best[ob.country] = ob.running_total
        if ob.country not in first_seen:
            first_seen[ob.country] = ob.position
    return Snapshot(index=index, date=date, entries=_rank(best, first_seen, k))

@dataclass(frozen=True)
class ReplaySequence:
    """Restartable, lazy sequence of snapshots (one per distinct date).

    Every `iter()` call starts a fresh scan, so iterating twice yields
    identical sequences and no state leaks between restarts.
    """
    records: Tuple[Record, ...]
    k: int = 10

    @classmethod
    def from_records(cls, records: Sequence[Record], k: int = 10) -> "ReplaySequence":
        if k < 1:
            raise ValueError("k must be >= 1")
        dated = tuple(r for r in records if r.date)
        if len(dated) < len(records):
            logger.warning("ignoring %d records without a date", len(records) - len(dated))
        return cls(records=dated, k=k)

    def dates(self) -> List[str]:
        return distinct_dates(self.records)

    def snapshot(self, date: str, k: Optional[int] = None) -> Snapshot:
        """Standings at any `date` (not only a replay date), from the same records as the frames."""
        return snapshot_at(cumulative_observations(self.records), date, k or self.k)

    def __len__(self) -> int:
        return len(self.dates())

    def __iter__(self) -> Iterator[Snapshot]:
        observations = cumulative_observations(self.records)
        # sweep observations in date order; ties keep scan order
        ordered = sorted((ob for ob in observations if ob.date), key=lambda ob: ob.date)
        best: Dict[str, int] = {}
        first_seen: Dict[str, int] = {}
        i = 0
        for index, date in enumerate(distinct_dates(self.records)):
            while i < len(ordered) and ordered[i].date <= date:
                ob = ordered[i]
                if ob.running_total > best.get(ob.country, -1):
                    best[ob.country] = ob.running_total
                if ob.position < first_seen.get(ob.country, len(observations)):
                    first_seen[ob.country] = ob.position
                i += 1
            yield Snapshot(index=index, date=date, entries=_rank(best, first_seen, self.k))

    def final_snapshot(self) -> Snapshot:
        """The last snapshot, or an empty one when there are no dated records."""
        last = Snapshot(index=0, date="", entries=())
        for snap in self:
            last = snap
        return last
