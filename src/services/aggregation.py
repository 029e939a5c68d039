"""
Aggregation of raw Tempo worklogs into the hierarchical cost report.
"""

from datetime import date, datetime

from core.errors import InputError, ParseError
from models.report import Effort, Issue, Project, Report, User
from models.roster import ProjectConfig, Roster
from models.tempo import RawEntry


# =============================================================================
# VALIDATION
# =============================================================================


def validate_period(date_from: date, date_to: date) -> None:
    """
    Check that a report period is usable.

    The period must be ordered and lie within one calendar month or two
    adjacent months (the sheet name only covers two months).

    Raises:
        InputError: If the period is reversed or too long
    """
    if date_from > date_to:
        raise InputError(f"Period start {date_from} is after period end {date_to}")

    months = (date_to.year - date_from.year) * 12 + date_to.month - date_from.month
    if months > 1:
        raise InputError(
            f"Period {date_from} - {date_to} spans more than two calendar months"
        )


def parse_entry_date(value: str) -> date:
    """Parse a worklog date in YYYY-MM-DD format."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid worklog date: '{value}'") from e


def parse_seconds(value) -> int:
    """Validate a time-spent value as a non-negative integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ParseError(f"Invalid time spent seconds: '{value}'")
    return value


# =============================================================================
# GROUPING
# =============================================================================


def build_efforts(entries: list[RawEntry]) -> list[Effort]:
    """Sum seconds per date, one Effort per date, in date order."""
    date_to_seconds: dict[date, int] = {}
    for entry in entries:
        entry_date = parse_entry_date(entry["date"])
        seconds = parse_seconds(entry["seconds"])
        date_to_seconds[entry_date] = date_to_seconds.get(entry_date, 0) + seconds

    return [Effort(date=d, seconds=s) for d, s in sorted(date_to_seconds.items())]


def build_issues(entries: list[RawEntry]) -> list[Issue]:
    """Group one user's entries by issue key, keeping first-seen order."""
    issue_to_entries: dict[str, list[RawEntry]] = {}
    for entry in entries:
        issue_to_entries.setdefault(entry["issue_key"], []).append(entry)

    return [
        Issue(key=issue_key, efforts=build_efforts(issue_entries))
        for issue_key, issue_entries in issue_to_entries.items()
    ]


def build_users(entries: list[RawEntry], project_config: ProjectConfig | None) -> list[User]:
    """
    Group a project's entries by account and resolve roster position/rate.

    Users missing from the roster get an empty position and a rate of 0.
    Result is sorted by display name, case-insensitive.
    """
    account_to_entries: dict[str, list[RawEntry]] = {}
    for entry in entries:
        account_to_entries.setdefault(entry["account_id"], []).append(entry)

    users = []
    for account_id, user_entries in account_to_entries.items():
        name = user_entries[0]["display_name"]
        user_config = project_config.users.get(name) if project_config else None

        users.append(
            User(
                account_id=account_id,
                name=name,
                position=user_config.position if user_config else "",
                rate=user_config.rate if user_config else 0,
                issues=build_issues(user_entries),
            )
        )

    return sorted(users, key=lambda u: u.name.lower())


# =============================================================================
# MAIN ENTRY POINTS
# =============================================================================


def build_project(project_key: str, entries: list[RawEntry], roster: Roster) -> Project:
    """Build one project; project info comes from the roster when known."""
    project_config = roster.get(project_key)

    if project_config is None:
        return Project(key=project_key, users=build_users(entries, None))

    return Project(
        key=project_key,
        display_name=project_config.display_name,
        owner=project_config.owner,
        manager=project_config.manager,
        users=build_users(entries, project_config),
    )


def aggregate(
    entries_by_project: dict[str, list[RawEntry]],
    roster: Roster,
    date_from: date,
    date_to: date,
) -> Report:
    """
    Fold raw worklogs into a Report.

    Args:
        entries_by_project: Project key -> raw entries, in report order
        roster: Current roster, used for project info and user rates
        date_from: First day of the period (inclusive)
        date_to: Last day of the period (inclusive)

    Returns:
        Report with one Project per key of entries_by_project

    Raises:
        InputError: Invalid period
        ParseError: Invalid entry date or seconds
    """
    validate_period(date_from, date_to)

    projects = [
        build_project(project_key, entries, roster)
        for project_key, entries in entries_by_project.items()
    ]

    return Report(date_from=date_from, date_to=date_to, projects=projects)
