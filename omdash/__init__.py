"""
OMDash package
==============

This package contains the Olympic Medal Dashboard (OMDash).

- The CLI entry point is in `omdash/cli.py`.
- Dataset loading is in `omdash/loader.py`.
- Grouping/counting is in `omdash/aggregate.py`.
- The date-by-date medal race is in `omdash/replay.py` (timing in `omdash/clock.py`).
- Charts are drawn by `omdash/render.py` and wired together in `omdash/dashboard.py`.
"""

__version__ = '0.3.0'
