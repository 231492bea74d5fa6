from __future__ import annotations

"""
OMDash report generator
-----------------------
This module writes a DOCX snapshot of the dashboard:
- the grouped bar chart (athletes per country per sport),
- the Sankey diagram + sport breakdown for the selected country (if any),
- the last frame of the medal race and the full medal table.

python-docx is imported lazily so the dashboard works without it until a
report is requested.
"""

from dataclasses import dataclass
from typing import List, Optional
import os
import tempfile
from datetime import datetime

from .dashboard import Dashboard
from .render import ChartState, RaceChart, save_figure


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Olympic Medal Dashboard"
    subtitle: str = "Athletes, sports and the medal race"
    athletes_file: Optional[str] = None
    medallists_file: Optional[str] = None

    # Rows of the medal table (None = every country)
    max_table_rows: Optional[int] = None

    # Optional: CLI commands that led to this state
    command_log: Optional[List[str]] = None


def generate_docx_report(dash: Dashboard, out_path: str, *, config: Optional[ReportConfig] = None) -> str:
    """Write the report and return `out_path`."""
    config = config or ReportConfig()

    try:
        from docx import Document
        from docx.shared import Inches, Pt
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    if not dash.athletes and not dash.medals:
        raise ValueError("Nothing to report on (both data sets are empty).")

    # -----------------------------
    # 1) Charts -> PNG files
    # -----------------------------
    tmpdir = tempfile.mkdtemp(prefix="omdash_report_")
    # (title, path)
    charts = []

    if dash.profiles:
        charts.append(("Athletes per country and sport", save_figure(dash.bar_chart(), os.path.join(tmpdir, "bar.png"))))

    if dash.sankey.figure is not None:
        charts.append((f"Sports of {dash.sankey.country}", save_figure(dash.sankey.figure, os.path.join(tmpdir, "sankey.png"))))

    final = dash.player.sequence.final_snapshot()
    if final.entries:
        # separate instance: the live race chart may be mid-replay
        race = RaceChart(ChartState(width=dash.config.chart_width, height=dash.config.race_height, dpi=dash.config.dpi))
        race.draw(final)
        charts.append((f"Top {dash.config.top_k} countries on {final.date}", race.save(os.path.join(tmpdir, "race.png"))))

    # -----------------------------
    # 2) DOCX
    # -----------------------------
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    def _table(header: List[str], rows: List[List[str]]) -> None:
        t = doc.add_table(rows=1, cols=len(header))
        for i, h in enumerate(header):
            t.rows[0].cells[i].text = h
        for row in rows:
            cells = t.add_row().cells
            for i, v in enumerate(row):
                cells[i].text = v

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    if config.athletes_file:
        _kv("Athletes file", os.path.basename(config.athletes_file))
    if config.medallists_file:
        _kv("Medallists file", os.path.basename(config.medallists_file))
    _kv("Athletes", str(len(dash.athletes)))
    _kv("Countries (athletes)", str(len(dash.profiles)))
    _kv("Medals", str(len(dash.medals)))
    dates = dash.dates()
    if dates:
        _kv("Medal dates", f"{dates[0]} to {dates[-1]} ({len(dates)} days)")

    doc.add_heading("Charts", level=1)
    for title, path in charts:
        doc.add_paragraph(title)
        doc.add_picture(path, width=Inches(6.5))
        doc.add_paragraph("")

    if dash.selected:
        doc.add_heading(f"Sport breakdown: {dash.selected}", level=1)
        _table(["Sport", "Athletes", "% of Total"],
               [[s, str(n), f"{pct:.2f}%"] for s, n, pct in dash.breakdown(dash.selected)])

    rows = dash.standings(config.max_table_rows)
    if rows:
        doc.add_heading("Total Medals by Country", level=1)
        _table(["Country", "Total Medals"], [[c, str(n)] for c, n in rows])

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_paragraph("")
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as omdash_version
    doc.add_paragraph(f"OMDash version: {omdash_version}")
    doc.add_paragraph(f"Report generated at: {datetime.now().isoformat(timespec='seconds')}")
    if config.command_log:
        doc.add_paragraph("Commands used (log):")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
