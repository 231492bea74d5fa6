"""
Replay player
=============

Drives a `ReplaySequence` on a clock: one snapshot per tick, then the
final standings. `restart()` always cancels the running interval before
arming a new one, so at most one replay timer exists at any time.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple
import logging
from .aggregate import final_totals, sorted_totals
from .clock import Clock, Interval
from .models import Snapshot
from .replay import ReplaySequence

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Snapshot], None]
FinishCallback = Callable[[List[Tuple[str, int]]], None]

@dataclass
class ReplayPlayer:
    """Timed emission of snapshots.

    Callbacks:
    - on_reset(): the chart should clear itself (and hide the final table)
    - on_snapshot(snapshot): draw one frame
    - on_finish(totals): all dates shown; `totals` is the full medal table
    """
    sequence: ReplaySequence
    clock: Clock
    tick_seconds: float = 2.0
    on_snapshot: Optional[SnapshotCallback] = None
    on_finish: Optional[FinishCallback] = None
    on_reset: Optional[Callable[[], None]] = None

    _interval: Optional[Interval] = field(default=None, init=False)
    _frames: Optional[Iterator[Snapshot]] = field(default=None, init=False)
    finished: bool = field(default=False, init=False)
    last: Optional[Snapshot] = field(default=None, init=False)

    @property
    def running(self) -> bool:
        return self._interval is not None and self._interval.active

    def start(self) -> None:
        """Start (or restart) the replay from the first date."""
        self.cancel()
        if self.on_reset:
            self.on_reset()
        self.finished = False
        self.last = None
        self._frames = iter(self.sequence)
        self._interval = self.clock.every(self.tick_seconds, self._tick)
        logger.debug("replay started: %d dates every %.3fs", len(self.sequence), self.tick_seconds)

    restart = start

    def cancel(self) -> None:
        if self._interval is not None:
            self._interval.cancel()
            self._interval = None

    def _tick(self) -> None:
        if self._frames is None:
            raise RuntimeError("replay not started")
        snap = next(self._frames, None)
        if snap is None:
            self.cancel()
            self.finished = True
            totals = self.final_table()
            logger.debug("replay finished: %d countries", len(totals))
            if self.on_finish:
                self.on_finish(totals)
            return
        self.last = snap
        logger.debug("tick %d: %s", snap.index, snap.date)
        if self.on_snapshot:
            self.on_snapshot(snap)

    def final_table(self) -> List[Tuple[str, int]]:
        """Every country with its final medal count, descending."""
        totals: Dict[str, int] = final_totals(self.sequence.records)
        return sorted_totals(totals)
