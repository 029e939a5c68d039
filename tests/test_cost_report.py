"""End-to-end tests for the cost report run."""

from datetime import date

import pytest
from openpyxl import load_workbook

from conftest import make_entry
from core.config import TokenProjects
from core.errors import DataSourceError, InputError, ParseError
from models.roster import ProjectConfig, Roster
from services.cost_report import create_cost_report, fetch_all_worklogs
from services.roster import load_roster, save_roster


class FakeTempo:
    def __init__(self, entries_by_project, fail_on=None):
        self.entries_by_project = entries_by_project
        self.fail_on = fail_on
        self.calls = []

    def __call__(self, token, project_key, date_from, date_to):
        self.calls.append((token, project_key, date_from, date_to))
        if project_key == self.fail_on:
            raise DataSourceError(f"Tempo error for {project_key}: 500")
        return self.entries_by_project.get(project_key, [])


@pytest.fixture
def paths(tmp_path):
    return tmp_path / "ProjectConfig.xlsx", tmp_path / "Report.xlsx"


def run(paths, fetch, tokens=None, period=(date(2024, 3, 1), date(2024, 3, 31))):
    roster_path, report_path = paths
    tokens = tokens or [TokenProjects(token="tok", project_keys=["ABC"])]
    return create_cost_report(
        *period, tokens, roster_path=roster_path, report_path=report_path,
        fetch=fetch, silent=True,
    )


def test_first_run_without_roster(paths):
    fetch = FakeTempo({"ABC": [make_entry(account_id="U1", display_name="U1", seconds=7200)]})

    result = run(paths, fetch)

    assert result.sheet_name == "March"
    [project] = result.report.projects
    assert project.key == "ABC"
    assert project.users[0].issues[0].efforts[0].seconds == 7200

    ws = load_workbook(result.report_path)["March"]
    assert ws["K4"].value == 2.0

    roster = load_roster(paths[0], silent=True)
    assert roster.get("ABC").users["U1"].rate == 0


def test_rates_and_idle_users_survive(paths, sample_roster):
    save_roster(paths[0], sample_roster, silent=True)
    fetch = FakeTempo({"ABC": [make_entry(display_name="Bob Smith", seconds=3600)]})

    result = run(paths, fetch)

    assert result.report.projects[0].users[0].rate == 40
    ws = load_workbook(paths[1])["March"]
    assert ws["A3"].value == "Alpha Build"
    assert ws["D4"].value == 40

    roster = load_roster(paths[0], silent=True)
    assert set(roster.get("ABC").users) == {"Bob Smith", "Idle Ivan"}


def test_projects_follow_token_order(paths):
    tokens = [
        TokenProjects(token="t1", project_keys=["B", "A"]),
        TokenProjects(token="t2", project_keys=["C"]),
    ]
    fetch = FakeTempo({})

    result = run(paths, fetch, tokens=tokens)

    assert [p.key for p in result.report.projects] == ["B", "A", "C"]
    assert [(c[0], c[1]) for c in fetch.calls] == [("t1", "B"), ("t1", "A"), ("t2", "C")]


def test_same_project_under_two_tokens_is_fetched_once():
    tokens = [
        TokenProjects(token="t1", project_keys=["ABC"]),
        TokenProjects(token="t2", project_keys=["ABC"]),
    ]
    fetch = FakeTempo({"ABC": [make_entry()]})

    entries = fetch_all_worklogs(tokens, date(2024, 3, 1), date(2024, 3, 31), fetch, silent=True)

    assert list(entries) == ["ABC"]
    assert len(entries["ABC"]) == 1
    assert [(c[0], c[1]) for c in fetch.calls] == [("t1", "ABC")]


def test_same_project_under_two_tokens_is_not_double_counted(paths):
    tokens = [
        TokenProjects(token="t1", project_keys=["ABC"]),
        TokenProjects(token="t2", project_keys=["ABC"]),
    ]
    fetch = FakeTempo({"ABC": [make_entry(account_id="U1", display_name="U1", seconds=7200)]})

    result = run(paths, fetch, tokens=tokens)

    assert [p.key for p in result.report.projects] == ["ABC"]
    ws = load_workbook(result.report_path)["March"]
    assert ws["K1"].value == "03/05"
    assert ws["K4"].value == 2.0


def test_malformed_roster_rate_writes_nothing(paths):
    roster_path, report_path = paths
    save_roster(roster_path, Roster(projects=[ProjectConfig(key="ABC")]), silent=True)
    wb = load_workbook(roster_path)
    wb["ABC"]["A8"] = "Bob Smith"
    wb["ABC"]["C8"] = "forty"
    wb.save(roster_path)
    roster_bytes = roster_path.read_bytes()
    fetch = FakeTempo({"ABC": [make_entry()]})

    with pytest.raises(ParseError):
        run(paths, fetch)

    assert fetch.calls == []
    assert not report_path.exists()
    assert roster_path.read_bytes() == roster_bytes


def test_fetch_failure_writes_nothing(paths):
    tokens = [TokenProjects(token="tok", project_keys=["ABC", "BAD"])]
    fetch = FakeTempo({"ABC": [make_entry()]}, fail_on="BAD")

    with pytest.raises(DataSourceError):
        run(paths, fetch, tokens=tokens)

    assert not paths[0].exists()
    assert not paths[1].exists()


def test_invalid_period_fetches_nothing(paths):
    fetch = FakeTempo({})

    with pytest.raises(InputError):
        run(paths, fetch, period=(date(2024, 3, 31), date(2024, 3, 1)))

    assert fetch.calls == []
