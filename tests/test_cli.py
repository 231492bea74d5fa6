"""Integration tests for the REPL command handler and the DOCX report."""

from __future__ import annotations

import docx
import pytest

from omdash.cli import build_parser, handle, main
from omdash.clock import LogicalClock
from omdash.config import DashboardConfig
from omdash.dashboard import build_dashboard
from omdash.report import ReportConfig, generate_docx_report

from conftest import make_records

pytestmark = pytest.mark.integration


@pytest.fixture
def dash(athletes, medals):
    """Dashboard on a logical clock with a short tick."""

    return build_dashboard(athletes, medals, config=DashboardConfig(tick_ms=10, chart_width=500), clock=LogicalClock())


def test_parser_requires_both_files() -> None:
    """Both data files are mandatory."""

    with pytest.raises(SystemExit):
        build_parser().parse_args(["--athletes", "a.csv"])


def test_config_validates_knobs() -> None:
    """Nonsense top_k or tick values are rejected."""

    with pytest.raises(ValueError):
        DashboardConfig(top_k=0)
    with pytest.raises(ValueError):
        DashboardConfig(tick_ms=0)
    assert DashboardConfig(tick_ms=250).tick_seconds == 0.25


def test_select_and_breakdown(dash, capsys) -> None:
    """select redraws the Sankey; breakdown defaults to the selection."""

    handle(dash, 'select "France"')
    handle(dash, "breakdown")
    out = capsys.readouterr().out
    assert "Selected France: 2 sports." in out
    assert "66.67%" in out


def test_select_unknown_country_reports_missing(dash, capsys) -> None:
    """Unknown countries leave the selection empty."""

    handle(dash, 'select "Atlantis"')
    assert "No data found for country: Atlantis" in capsys.readouterr().out
    assert dash.selected is None


def test_topk_on_given_date(dash, capsys) -> None:
    """topk prints the standings for one date."""

    handle(dash, "topk 2 2024-07-28")
    out = capsys.readouterr().out
    assert "Date: 2024-07-28" in out
    assert "United States" in out and "France" in out
    assert "Kenya" not in out


def test_play_runs_full_replay(dash) -> None:
    """play drives the race to the final table on the dashboard's clock."""

    handle(dash, "play")
    assert dash.player.finished
    assert dash.race.table_visible
    assert dash.race.final_rows[0] == ("United States", 2)


def test_save_requires_selection_for_sankey(dash, tmp_path) -> None:
    """The Sankey chart only exists after a selection."""

    with pytest.raises(ValueError, match="No country selected"):
        handle(dash, f'save sankey "{tmp_path / "s.png"}"')
    handle(dash, 'select "Kenya"')
    handle(dash, f'save sankey "{tmp_path / "s.png"}"')
    assert (tmp_path / "s.png").exists()


def test_report_written(dash, tmp_path) -> None:
    """The DOCX report contains the breakdown and medal table."""

    dash.select("France")
    out = generate_docx_report(dash, str(tmp_path / "r.docx"), config=ReportConfig(command_log=['select "France"']))
    doc = docx.Document(out)
    text = "\n".join(p.text for p in doc.paragraphs)
    assert "Sport breakdown: France" in text
    assert "Total Medals by Country" in text
    assert len(doc.tables) == 2
    assert doc.tables[1].rows[1].cells[0].text == "United States"


def test_main_repl_session(athletes_csv, medallists_csv, monkeypatch, capsys) -> None:
    """A scripted REPL session loads, answers and exits cleanly."""

    lines = iter(["stats", 'select "France"', "bogus", "totals 1", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    main(["--athletes", str(athletes_csv), "--medallists", str(medallists_csv)])
    out = capsys.readouterr().out
    assert "Loaded 4 athletes and 4 medals." in out
    assert "Selected France: 2 sports." in out
    assert "Unknown command." in out
    assert "France                         2" in out


def test_totals_zero_prints_nothing(dash, capsys) -> None:
    """totals 0 asks for an empty table, not the whole one."""

    handle(dash, "totals 0")
    assert capsys.readouterr().out == ""
    assert dash.standings(0) == []
    assert len(dash.standings()) == 4


def test_undated_medals_do_not_split_topk_and_play(athletes, medals, capsys) -> None:
    """topk, the last replay frame and the final table count the same medals."""

    extra = make_records([("Kenya", "Athletics", ""), ("Kenya", "Athletics", "")])
    dash = build_dashboard(athletes, medals + extra, config=DashboardConfig(tick_ms=10), clock=LogicalClock())
    handle(dash, "topk 10 2024-07-29")
    assert "Kenya                          1" in capsys.readouterr().out
    handle(dash, "play")
    assert dash.race.final_rows == dash.player.sequence.final_snapshot().as_pairs()
    assert ("Kenya", 1) in dash.standings()
