"""
Roster store: per-project user positions and rates kept in an Excel workbook.

Each project is one sheet named after the project key, holding a small
project info block and a Name/Position/Rate user table. The roster is
read at the start of a run and rewritten from scratch at the end.
"""

from pathlib import Path
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from core.config import (
    CURRENCY_FORMAT,
    ROSTER_COLUMN_WIDTHS,
    ROSTER_INFO_HEADER,
    ROSTER_INFO_LABELS,
    ROSTER_INFO_ROWS,
    ROSTER_KEEP_INACTIVE_PROJECTS,
    ROSTER_USER_HEADER_ROW,
    ROSTER_USER_HEADERS,
)
from core.errors import ParseError, StorageError
from models.report import Report
from models.roster import ProjectConfig, Roster, UserConfig
from services.styles import header_style, zero_value_rule


# =============================================================================
# READING
# =============================================================================


def parse_rate(value, sheet: str, row: int) -> int:
    """
    Parse a rate cell into whole currency units.

    Empty cells are 0. Integral numbers and numeric strings are accepted.

    Raises:
        ParseError: For any other value
    """
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ParseError(f"Invalid rate '{value}' in roster sheet '{sheet}', row {row}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ParseError(f"Invalid rate '{value}' in roster sheet '{sheet}', row {row}")


def _cell_text(value) -> str:
    return str(value).strip() if value is not None else ""


def is_project_sheet(ws) -> bool:
    """A project sheet carries the info header in A1 or the user table header on row 7."""
    if _cell_text(ws.cell(row=1, column=1).value) == ROSTER_INFO_HEADER:
        return True
    return _cell_text(ws.cell(row=ROSTER_USER_HEADER_ROW, column=1).value) == ROSTER_USER_HEADERS[0]


def read_project_config(ws) -> ProjectConfig:
    """Read one roster sheet."""
    info = {
        field: _cell_text(ws.cell(row=row, column=2).value)
        for field, row in ROSTER_INFO_ROWS.items()
    }

    users = {}
    rows = ws.iter_rows(
        min_row=ROSTER_USER_HEADER_ROW + 1,
        max_col=len(ROSTER_USER_HEADERS),
        values_only=True,
    )
    for row_idx, row in enumerate(rows, start=ROSTER_USER_HEADER_ROW + 1):
        name = _cell_text(row[0])
        if not name:
            continue

        users[name] = UserConfig(
            position=_cell_text(row[1]) if len(row) > 1 else "",
            rate=parse_rate(row[2], ws.title, row_idx) if len(row) > 2 else 0,
        )

    return ProjectConfig(
        key=ws.title,
        display_name=info["display_name"],
        owner=info["owner"],
        manager=info["manager"],
        users=users,
    )


def load_roster(path: Path, silent: bool = False) -> Roster:
    """
    Load the roster store.

    A missing file is an empty roster. Sheets with neither the project
    info header nor the user table header are ignored.

    Raises:
        StorageError: The file exists but cannot be opened
        ParseError: A rate cell is malformed
    """
    if not path.exists():
        if not silent:
            print(f"Roster not found, starting empty: {path}")
        return Roster()

    try:
        wb = load_workbook(str(path))
    except (OSError, InvalidFileException, BadZipFile, KeyError) as e:
        raise StorageError(f"Cannot read roster {path}: {e}") from e

    try:
        projects = [
            read_project_config(ws)
            for ws in wb.worksheets
            if is_project_sheet(ws)
        ]
    finally:
        wb.close()

    if not silent:
        print(f"Parsed roster {path}: {len(projects)} project(s)")
        for project in projects:
            print(f"  {project.key}: {len(project.users)} user(s)")

    return Roster(projects=projects)


# =============================================================================
# SYNCHRONIZATION
# =============================================================================


def sync_roster(
    existing: Roster,
    report: Report,
    keep_inactive_projects: bool = ROSTER_KEEP_INACTIVE_PROJECTS,
) -> Roster:
    """
    Merge the report's users into the roster.

    Users reporting time this period win; users known to the roster but
    idle this period keep their previous position and rate. Projects
    missing from the report are dropped unless keep_inactive_projects.
    """
    projects = []

    for report_project in report.projects:
        users = {
            user.name: UserConfig(position=user.position, rate=user.rate)
            for user in report_project.users
        }

        project_config = existing.get(report_project.key)
        if project_config is not None:
            for name, user_config in project_config.users.items():
                if name not in users:
                    users[name] = UserConfig(
                        position=user_config.position, rate=user_config.rate
                    )

        projects.append(
            ProjectConfig(
                key=report_project.key,
                display_name=report_project.display_name,
                owner=report_project.owner,
                manager=report_project.manager,
                users=users,
            )
        )

    if keep_inactive_projects:
        report_keys = {project.key for project in report.projects}
        projects.extend(p for p in existing.projects if p.key not in report_keys)

    return Roster(projects=projects)


# =============================================================================
# WRITING
# =============================================================================


def write_project_info(ws, project: ProjectConfig) -> None:
    """Write the merged 'Project Info' block in A1:C5."""
    ws.merge_cells("A1:C1")
    header = ws.cell(row=1, column=1, value=ROSTER_INFO_HEADER)
    header_style(header)

    values = {
        "key": project.key,
        "display_name": project.display_name,
        "owner": project.owner,
        "manager": project.manager,
    }
    for field, row in ROSTER_INFO_ROWS.items():
        ws.merge_cells(start_row=row, start_column=2, end_row=row, end_column=3)
        ws.cell(row=row, column=1, value=ROSTER_INFO_LABELS[field])
        ws.cell(row=row, column=2, value=values[field])


def write_user_table(ws, project: ProjectConfig) -> None:
    """Write the Name/Position/Rate table, users sorted by name."""
    header_row = ROSTER_USER_HEADER_ROW

    for col_letter, width in ROSTER_COLUMN_WIDTHS.items():
        ws.column_dimensions[col_letter].width = width

    # Spacer between the info block and the user table
    ws.merge_cells(
        start_row=header_row - 1, start_column=1,
        end_row=header_row - 1, end_column=len(ROSTER_USER_HEADERS),
    )

    for col_idx, title in enumerate(ROSTER_USER_HEADERS, start=1):
        header_style(ws.cell(row=header_row, column=col_idx, value=title))

    row_idx = header_row
    for name in sorted(project.users):
        row_idx += 1
        user = project.users[name]
        ws.cell(row=row_idx, column=1, value=name)
        ws.cell(row=row_idx, column=2, value=user.position)
        rate_cell = ws.cell(row=row_idx, column=3, value=user.rate)
        rate_cell.number_format = CURRENCY_FORMAT

    if row_idx > header_row:
        ws.conditional_formatting.add(f"C{header_row + 1}:C{row_idx}", zero_value_rule())


def save_roster(path: Path, roster: Roster, silent: bool = False) -> None:
    """
    Replace the roster store with the given roster.

    Raises:
        StorageError: The file cannot be written
    """
    wb = Workbook()
    default_sheet = wb.active

    for project in roster.projects:
        ws = wb.create_sheet(title=project.key)
        write_project_info(ws, project)
        write_user_table(ws, project)

    # openpyxl cannot save a workbook without sheets
    if roster.projects:
        wb.remove(default_sheet)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(str(path))
    except OSError as e:
        raise StorageError(f"Cannot write roster {path}: {e}") from e

    if not silent:
        print(f"Synchronized roster {path}: {len(roster.projects)} project(s)")
