"""
OMDash Command Line Interface (CLI)
===================================

The interactive terminal program you run like:

    omdash --athletes data/athletes.csv --medallists data/medallists.csv

It loads both files once, builds the dashboard and then reads commands in a
REPL (Read-Eval-Print Loop): inspect countries, select one for the Sankey
view, replay the medal race, save charts, write a DOCX report.

The CLI never modifies the data files.
"""

from __future__ import annotations
import argparse, logging, shlex
from typing import List, Optional
from .clock import Clock
from .config import DashboardConfig
from .dashboard import Dashboard, build_dashboard
from .loader import load_athletes, load_medallists
from .models import Snapshot
from .render import save_figure

HELP = """
Commands:
  help
  stats
  countries [prefix]                (example: countries fr)
  select "<Country>"                (redraws the Sankey view for that country)
  breakdown ["<Country>"]           (sports, athletes, % of total; default = selected)

  dates
  topk [k] [date]                   (example: topk 5 2024-07-30)
  totals [n]                        (final medal table)
  play                              (replay the medal race; Ctrl-C stops it)
  restart                           (stop any running replay and start over)

  save bar|sankey|race "<path.png>"
  report "<path.docx>"
  quit
"""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="omdash", description="Olympic medal dashboard")
    ap.add_argument("--athletes", required=True, help="Path to athletes.csv (country, disciplines)")
    ap.add_argument("--medallists", required=True, help="Path to medallists.csv (medal_date, country_long)")
    ap.add_argument("--top-k", type=int, default=10, help="Bars shown per race frame")
    ap.add_argument("--tick-ms", type=int, default=2000, help="Replay cadence in milliseconds")
    ap.add_argument("--pinned", default="United States", help="Country shown first in the bar chart")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def _print_snapshot(snap: Snapshot) -> None:
    print(f"Date: {snap.date}")
    for rank, e in enumerate(snap.entries, 1):
        print(f"  {rank:>2}. {e.country:<30} {e.total}")


def _attach_printer(dash: Dashboard) -> None:
    """Echo every race frame and the final table on stdout as well."""
    draw, finish = dash.player.on_snapshot, dash.player.on_finish

    def on_snapshot(snap: Snapshot) -> None:
        if draw:
            draw(snap)
        _print_snapshot(snap)

    def on_finish(rows) -> None:
        if finish:
            finish(rows)
        print("Total Medals by Country:")
        for c, n in rows:
            print(f"  {c:<30} {n}")

    dash.player.on_snapshot = on_snapshot
    dash.player.on_finish = on_finish


def main(argv: Optional[List[str]] = None):
    """Entry point for the OMDash CLI.

    1) Load both data files
    2) Build the dashboard
    3) Start an interactive REPL
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    config = DashboardConfig(top_k=args.top_k, tick_ms=args.tick_ms, pinned_country=args.pinned)
    print("Loading datasets...")
    athletes = load_athletes(args.athletes, config)
    medals = load_medallists(args.medallists, config)
    dash = build_dashboard(athletes, medals, config=config, clock=Clock())
    dash.sources = (args.athletes, args.medallists)
    _attach_printer(dash)
    command_log: List[str] = []

    print(f"Loaded {len(athletes)} athletes and {len(medals)} medals. Type 'help' for commands.")
    while True:
        try:
            line = input("omdash> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        if stripped.split()[0].lower() in ("select", "play", "restart"):
            command_log.append(stripped)
        try:
            handle(dash, stripped, command_log)
        except Exception as e:
            print(f"Error: {e}")
    dash.close()


def _run_replay(dash: Dashboard) -> None:
    dash.play()
    try:
        dash.clock.run()
    except KeyboardInterrupt:
        dash.player.cancel()
        print("Replay stopped.")


def handle(dash: Dashboard, line: str, command_log: Optional[List[str]] = None) -> None:
    """Handle one CLI command line."""
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "stats":
        dates = dash.dates()
        print(f"Athletes: {len(dash.athletes)} | Countries: {len(dash.profiles)} | Medals: {len(dash.medals)}")
        if dates:
            print(f"Medal dates: {dates[0]} .. {dates[-1]} ({len(dates)})")
        print(f"Selected: {dash.selected or '-'}")
        return

    if cmd == "countries":
        vals = dash.countries(parts[1] if len(parts) >= 2 else "")
        for v in vals[:50]:
            print(v)
        if len(vals) > 50:
            print(f"... ({len(vals)} total, showing 50)")
        return

    if cmd == "select":
        if len(parts) < 2:
            raise ValueError('Usage: select "<Country>"')
        country = parts[1]
        dash.select(country)
        if dash.selected == country:
            print(f"Selected {country}: {len(dash.sankey.data.links)} sports.")
        else:
            print(f"No data found for country: {country}")
        return

    if cmd == "breakdown":
        country = parts[1] if len(parts) >= 2 else dash.selected
        if not country:
            raise ValueError('No country selected. Usage: breakdown "<Country>"')
        print(f"{'Sport':<40} {'Athletes':>8} {'% of Total':>10}")
        for sport, n, pct in dash.breakdown(country):
            print(f"{sport:<40} {n:>8} {pct:>9.2f}%")
        return

    if cmd == "dates":
        for d in dash.dates():
            print(d)
        return

    if cmd == "topk":
        k = int(parts[1]) if len(parts) >= 2 else dash.config.top_k
        dates = dash.dates()
        if not dates:
            print("No dated medals.")
            return
        date = parts[2] if len(parts) >= 3 else dates[-1]
        _print_snapshot(dash.player.sequence.snapshot(date, k))
        return

    if cmd == "totals":
        n = int(parts[1]) if len(parts) >= 2 else None
        for c, total in dash.standings(n):
            print(f"{c:<30} {total}")
        return

    if cmd in ("play", "restart"):
        _run_replay(dash)
        return

    if cmd == "save":
        if len(parts) < 3:
            raise ValueError('Usage: save bar|sankey|race "<path.png>"')
        kind, path = parts[1].lower(), parts[2]
        if kind == "bar":
            save_figure(dash.bar_chart(), path)
        elif kind == "sankey":
            if dash.sankey.figure is None:
                raise ValueError("No country selected yet.")
            save_figure(dash.sankey.figure, path)
        elif kind == "race":
            dash.race.save(path)
        else:
            raise ValueError("save kind must be: bar, sankey, race")
        print(f"Saved {kind} chart to {path}")
        return

    if cmd == "report":
        from .report import generate_docx_report, ReportConfig
        if len(parts) < 2:
            raise ValueError('Usage: report "<path.docx>"')
        cfg = ReportConfig(athletes_file=dash.sources[0], medallists_file=dash.sources[1], command_log=command_log)
        generate_docx_report(dash, parts[1], config=cfg)
        print(f"Report written to {parts[1]}")
        return

    print("Unknown command. Type 'help'.")


if __name__ == "__main__":
    main()
