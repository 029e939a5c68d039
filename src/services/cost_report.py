"""
Cost report generation: Tempo worklogs + roster -> Excel report.

Nothing is written until every worklog has been fetched and aggregated;
the report workbook and the roster store are each saved once per run.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from core.config import REPORT_PATH, ROSTER_PATH, TokenProjects
from models.report import Report
from models.roster import Roster
from models.tempo import RawEntry
from services.aggregation import aggregate, validate_period
from services.roster import load_roster, save_roster, sync_roster
from services.spreadsheet import render_report
from services.tempo import TempoClient

# (token, project_key, date_from, date_to) -> complete list of worklogs
FetchWorklogs = Callable[[str, str, date, date], list[RawEntry]]


@dataclass
class CostReportResult:
    """Result of one cost report run."""

    report: Report
    roster: Roster
    report_path: Path
    sheet_name: str


def fetch_all_worklogs(
    tokens: list[TokenProjects],
    date_from: date,
    date_to: date,
    fetch: FetchWorklogs,
    silent: bool = False,
) -> dict[str, list[RawEntry]]:
    """
    Fetch worklogs for every project of every token, in configuration order.

    A project listed under several tokens is fetched once, with the first
    token that lists it. The first failure propagates; nothing is retried.
    """
    entries_by_project: dict[str, list[RawEntry]] = {}

    for token_projects in tokens:
        for project_key in token_projects.project_keys:
            if project_key in entries_by_project:
                if not silent:
                    print(f"  WARNING: {project_key} is listed under several tokens, already fetched")
                continue
            if not silent:
                print(f"  Fetching worklogs for {project_key}...")
            entries_by_project[project_key] = fetch(
                token_projects.token, project_key, date_from, date_to
            )

    return entries_by_project


def create_cost_report(
    date_from: date,
    date_to: date,
    tokens: list[TokenProjects],
    roster_path: Path = ROSTER_PATH,
    report_path: Path = REPORT_PATH,
    fetch: FetchWorklogs | None = None,
    silent: bool = False,
) -> CostReportResult:
    """
    Build the cost report for a period and synchronize the roster.

    Args:
        date_from: First day of the period
        date_to: Last day of the period
        tokens: Tempo tokens and the project keys each one reads
        roster_path: Roster store workbook
        report_path: Report workbook (created or updated)
        fetch: Worklog source, defaults to the Tempo API
        silent: If True, suppress print statements

    Returns:
        CostReportResult with the report, synchronized roster and sheet name

    Raises:
        InputError: Invalid period or roster content
        DataSourceError: Tempo fetch failed
        StorageError: Roster or report workbook unreadable/unwritable
    """
    validate_period(date_from, date_to)

    if fetch is None:
        fetch = TempoClient(silent=silent).fetch_worklogs

    # 1. Roster
    existing_roster = load_roster(roster_path, silent)

    # 2. Worklogs
    if not silent:
        print(f"Fetching worklogs for {date_from} to {date_to}")
    entries_by_project = fetch_all_worklogs(tokens, date_from, date_to, fetch, silent)
    total = sum(len(entries) for entries in entries_by_project.values())
    if not silent:
        print(f"Total worklogs: {total}")

    # 3. Aggregate and merge roster
    report = aggregate(entries_by_project, existing_roster, date_from, date_to)
    updated_roster = sync_roster(existing_roster, report)

    # 4. Write report, then roster
    sheet_name = render_report(report, report_path, silent)
    save_roster(roster_path, updated_roster, silent)

    return CostReportResult(
        report=report,
        roster=updated_roster,
        report_path=report_path,
        sheet_name=sheet_name,
    )
