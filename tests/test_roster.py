"""Tests for the roster store and roster synchronization."""

from datetime import date

import pytest
from openpyxl import Workbook, load_workbook

from core.errors import ParseError, StorageError
from models.report import Project, Report, User
from models.roster import ProjectConfig, Roster, UserConfig
from services.roster import load_roster, parse_rate, save_roster, sync_roster


def make_report(*projects):
    return Report(date_from=date(2024, 3, 1), date_to=date(2024, 3, 31), projects=list(projects))


# =============================================================================
# SYNCHRONIZATION
# =============================================================================


def test_sync_keeps_idle_users(sample_roster):
    report = make_report(
        Project(
            key="ABC",
            display_name="Alpha Build",
            owner="Olivia Owner",
            manager="Alice",
            users=[User(account_id="u1", name="Bob Smith", position="Developer", rate=40)],
        )
    )

    roster = sync_roster(sample_roster, report)

    users = roster.get("ABC").users
    assert users["Bob Smith"] == UserConfig(position="Developer", rate=40)
    assert users["Idle Ivan"] == UserConfig(position="QA", rate=25)


def test_sync_report_users_win():
    existing = Roster(
        projects=[ProjectConfig(key="ABC", users={"Bob": UserConfig("Junior", 10)})]
    )
    report = make_report(
        Project(key="ABC", users=[User(account_id="u1", name="Bob", position="Senior", rate=50)])
    )

    roster = sync_roster(existing, report)

    assert roster.get("ABC").users["Bob"] == UserConfig("Senior", 50)


def test_sync_with_empty_roster_adds_all_users():
    report = make_report(
        Project(
            key="NEW",
            users=[
                User(account_id="u1", name="Bob"),
                User(account_id="u2", name="Carol", position="PM", rate=30),
            ],
        )
    )

    roster = sync_roster(Roster(), report)

    assert roster.get("NEW").users == {
        "Bob": UserConfig("", 0),
        "Carol": UserConfig("PM", 30),
    }


def test_sync_project_info_comes_from_report():
    report = make_report(Project(key="ABC", display_name="Alpha", owner="O", manager="M"))

    roster = sync_roster(Roster(), report)

    project = roster.get("ABC")
    assert (project.display_name, project.owner, project.manager) == ("Alpha", "O", "M")


def test_sync_drops_inactive_projects_by_default(sample_roster):
    report = make_report(Project(key="XYZ"))

    roster = sync_roster(sample_roster, report, keep_inactive_projects=False)

    assert [p.key for p in roster.projects] == ["XYZ"]


def test_sync_can_keep_inactive_projects(sample_roster):
    report = make_report(Project(key="XYZ"))

    roster = sync_roster(sample_roster, report, keep_inactive_projects=True)

    assert [p.key for p in roster.projects] == ["XYZ", "ABC"]
    assert roster.get("ABC").users["Idle Ivan"].rate == 25


def test_sync_does_not_mutate_existing(sample_roster):
    report = make_report(Project(key="ABC", users=[User(account_id="u9", name="New Guy")]))

    sync_roster(sample_roster, report)

    assert "New Guy" not in sample_roster.get("ABC").users


# =============================================================================
# STORE
# =============================================================================


def test_missing_store_is_empty_roster(tmp_path):
    roster = load_roster(tmp_path / "missing.xlsx", silent=True)

    assert roster.projects == []


def test_save_and_load(tmp_path, sample_roster):
    path = tmp_path / "roster" / "ProjectConfig.xlsx"

    save_roster(path, sample_roster, silent=True)
    roster = load_roster(path, silent=True)

    assert roster == sample_roster


def test_saved_layout(tmp_path, sample_roster):
    path = tmp_path / "ProjectConfig.xlsx"

    save_roster(path, sample_roster, silent=True)

    wb = load_workbook(path)
    assert wb.sheetnames == ["ABC"]
    ws = wb["ABC"]
    assert ws["A1"].value == "Project Info"
    assert ws["A1"].font.bold
    assert ws["A2"].value == "Key"
    assert ws["B2"].value == "ABC"
    assert ws["A5"].value == "Manager"
    assert ws["B5"].value == "Alice"
    assert [c.value for c in ws[7]] == ["Name", "Position", "Rate"]
    # Sorted by name
    assert ws["A8"].value == "Bob Smith"
    assert ws["A9"].value == "Idle Ivan"
    assert ws["C9"].value == 25

    merged = {str(r) for r in ws.merged_cells.ranges}
    assert {"A1:C1", "B2:C2", "B5:C5", "A6:C6"} <= merged

    rules = [cf for cf in ws.conditional_formatting if "C8" in cf.sqref]
    assert rules
    assert rules[0].rules[0].operator == "equal"
    assert rules[0].rules[0].formula == ["0"]


def test_save_empty_roster(tmp_path):
    path = tmp_path / "ProjectConfig.xlsx"

    save_roster(path, Roster(), silent=True)

    assert load_roster(path, silent=True).projects == []


def test_malformed_rate_fails(tmp_path):
    path = tmp_path / "ProjectConfig.xlsx"
    save_roster(path, Roster(projects=[ProjectConfig(key="ABC")]), silent=True)
    wb = load_workbook(path)
    wb["ABC"]["A8"] = "Bob"
    wb["ABC"]["C8"] = "forty"
    wb.save(path)

    with pytest.raises(ParseError, match="forty"):
        load_roster(path, silent=True)


def test_rows_without_name_are_skipped(tmp_path):
    path = tmp_path / "ProjectConfig.xlsx"
    save_roster(path, Roster(projects=[ProjectConfig(key="ABC")]), silent=True)
    wb = load_workbook(path)
    ws = wb["ABC"]
    ws["B8"] = "Orphan position"
    ws["C8"] = 10
    ws["A9"] = "Bob"
    ws["C9"] = "35"
    wb.save(path)

    roster = load_roster(path, silent=True)

    assert roster.get("ABC").users == {"Bob": UserConfig(position="", rate=35)}


def test_sheets_without_info_block_are_ignored(tmp_path):
    path = tmp_path / "ProjectConfig.xlsx"
    wb = Workbook()
    wb.active["A1"] = "notes"
    wb.save(path)

    assert load_roster(path, silent=True).projects == []


def test_sheet_with_user_table_but_no_info_block_is_read(tmp_path):
    path = tmp_path / "ProjectConfig.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.title = "ABC"
    ws["A7"] = "Name"
    ws["B7"] = "Position"
    ws["C7"] = "Rate"
    ws["A8"] = "Bob"
    ws["B8"] = "Developer"
    ws["C8"] = 40
    wb.save(path)

    roster = load_roster(path, silent=True)

    assert [p.key for p in roster.projects] == ["ABC"]
    assert roster.get("ABC").users == {"Bob": UserConfig(position="Developer", rate=40)}
    assert roster.get("ABC").manager == ""


def test_unreadable_store(tmp_path):
    path = tmp_path / "ProjectConfig.xlsx"
    path.write_text("not a workbook")

    with pytest.raises(StorageError):
        load_roster(path, silent=True)


@pytest.mark.parametrize(
    "value, expected",
    [(None, 0), ("", 0), (40, 40), (40.0, 40), (" 35 ", 35)],
)
def test_parse_rate(value, expected):
    assert parse_rate(value, "ABC", 8) == expected


@pytest.mark.parametrize("value", ["abc", 40.5, True])
def test_parse_rate_invalid(value):
    with pytest.raises(ParseError):
        parse_rate(value, "ABC", 8)
