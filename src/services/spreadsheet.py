"""
Excel cost report generation.

Renders a Report as one sheet per period: six fixed columns (name,
manager, position, rate, total hours, total cost) followed by one column
per day. Each project gets a total row with SUM formulas over its user
rows; each user row sums its day columns and multiplies by the rate.
"""

from collections import defaultdict
from datetime import date, timedelta
from pathlib import Path
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Border, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from core.config import (
    BORDER_SHADE_PERCENT,
    CURRENCY_FORMAT,
    DATE_COLUMN_WIDTH,
    DATE_LABEL_FORMAT,
    FILL_SHADE_PERCENT,
    PROJECT_BOTTOM_BORDER_COLOR,
    REPORT_FIXED_COLUMNS,
    SPACER_BORDER_COLOR,
    WEEKEND_FILL_COLOR,
)
from core.errors import LayoutInvariantError, StorageError
from models.layout import LayoutContext
from models.report import Project, Report, User
from services.colors import assign_colors, shade_color
from services.styles import BOLD, CENTER, argb, box_border, solid_fill, zero_value_rule


# =============================================================================
# FORMATTING HELPERS
# =============================================================================


def format_date_label(d: date) -> str:
    """Format a day as its column header, e.g. '03/05'."""
    return d.strftime(DATE_LABEL_FORMAT)


def seconds_to_hours(seconds: int) -> float:
    """Convert seconds to hours rounded to 2 decimals (5400 -> 1.5)."""
    return round(seconds / 3600, 2)


def iter_days(date_from: date, date_to: date):
    """Yield every day from date_from to date_to inclusive."""
    for offset in range((date_to - date_from).days + 1):
        yield date_from + timedelta(days=offset)


def get_sheet_name(report: Report) -> str:
    """'March' for a single-month period, 'March - April' otherwise."""
    date_from = report.date_from
    date_to = report.date_to

    if (date_from.year, date_from.month) == (date_to.year, date_to.month):
        return date_from.strftime("%B")
    return f"{date_from.strftime('%B')} - {date_to.strftime('%B')}"


# =============================================================================
# WORKBOOK SETUP
# =============================================================================


def open_or_create_workbook(path: Path) -> Workbook:
    """
    Open the target workbook, or start an empty one if it doesn't exist.

    Raises:
        StorageError: The file exists but cannot be opened
    """
    if not path.exists():
        wb = Workbook()
        wb.remove(wb.active)
        return wb

    try:
        return load_workbook(str(path))
    except (OSError, InvalidFileException, BadZipFile, KeyError) as e:
        raise StorageError(f"Cannot open report {path}: {e}") from e


def create_period_sheet(wb: Workbook, sheet_name: str):
    """
    Create the period sheet and make it the active one.

    A sheet with the same name is replaced in place, so re-running a
    period regenerates it without touching other sheets.
    """
    if sheet_name in wb.sheetnames:
        index = wb.sheetnames.index(sheet_name)
        wb.remove(wb[sheet_name])
        ws = wb.create_sheet(title=sheet_name, index=index)
    else:
        ws = wb.create_sheet(title=sheet_name)

    wb.active = ws
    for sheet in wb.worksheets:
        sheet.sheet_view.tabSelected = sheet is ws
    return ws


def create_layout_context(report: Report) -> LayoutContext:
    return LayoutContext(project_colors=assign_colors(report.projects))


# =============================================================================
# HEADER
# =============================================================================


def write_header(ws, context: LayoutContext, report: Report) -> None:
    """
    Write the fixed column headers and one 'MM/DD' column per day.

    Weekend columns get a light red fill. Records the date column range
    and label -> column map in the context.
    """
    row = context.last_row

    for col_idx, (title, width) in enumerate(REPORT_FIXED_COLUMNS, start=1):
        cell = ws.cell(row=row, column=col_idx, value=title)
        cell.font = BOLD
        cell.alignment = CENTER
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    col_idx = len(REPORT_FIXED_COLUMNS)
    context.first_date_column = col_idx + 1

    for day in iter_days(report.date_from, report.date_to):
        col_idx += 1
        label = format_date_label(day)

        cell = ws.cell(row=row, column=col_idx, value=label)
        cell.font = BOLD
        cell.alignment = CENTER
        if day.weekday() >= 5:
            cell.fill = solid_fill(WEEKEND_FILL_COLOR)
        ws.column_dimensions[get_column_letter(col_idx)].width = DATE_COLUMN_WIDTH

        context.date_columns[label] = col_idx

    context.last_date_column = col_idx
    context.cols_count = col_idx


# =============================================================================
# PROJECT ROWS
# =============================================================================


def write_spacer_row(ws, context: LayoutContext) -> None:
    """Blank full-width row separating project blocks."""
    context.last_row += 1
    border = Border(left=Side(style="thin", color=argb(SPACER_BORDER_COLOR)))

    for col_idx in range(1, context.cols_count + 1):
        ws.cell(row=context.last_row, column=col_idx).border = border


def write_project_row(ws, context: LayoutContext, project: Project) -> None:
    """
    Write the project total row.

    Total hours/cost are SUM formulas over the user rows written right
    after this one. Owner is shown in Position merged across Rate.
    """
    context.last_row += 1
    row = context.last_row
    c = context

    border = fill = None
    color = c.project_colors.get(project.key)
    if color:
        border = box_border(
            shade_color(color, BORDER_SHADE_PERCENT),
            bottom_color=PROJECT_BOTTOM_BORDER_COLOR,
        )
        fill = solid_fill(shade_color(color, FILL_SHADE_PERCENT))

    for col_idx in range(1, c.cols_count + 1):
        cell = ws.cell(row=row, column=col_idx)
        cell.font = BOLD
        if color:
            cell.border = border
            cell.fill = fill

    ws[f"{c.name_column}{row}"] = project.title

    manager_cell = ws[f"{c.manager_column}{row}"]
    manager_cell.value = project.manager
    manager_cell.alignment = CENTER

    owner_cell = ws[f"{c.position_column}{row}"]
    owner_cell.value = project.owner
    owner_cell.alignment = CENTER
    ws.merge_cells(f"{c.position_column}{row}:{c.rate_column}{row}")

    hours_cell = ws[f"{c.total_hours_column}{row}"]
    cost_cell = ws[f"{c.total_cost_column}{row}"]
    cost_cell.number_format = CURRENCY_FORMAT

    if project.users:
        first_row = row + 1
        last_row = row + len(project.users)
        hours_cell.value = f"=SUM({c.total_hours_column}{first_row}:{c.total_hours_column}{last_row})"
        cost_cell.value = f"=SUM({c.total_cost_column}{first_row}:{c.total_cost_column}{last_row})"
    else:
        # An empty range would point back at this row
        hours_cell.value = 0
        cost_cell.value = 0


def style_user_rows(ws, context: LayoutContext, project: Project) -> None:
    """
    Pre-style the block of user rows that follows the project row.

    Colored projects get a base-color fill and a shaded border on every
    cell. Date cells are centered, rate and cost use the currency format,
    and zero rates are flagged.
    """
    if not project.users:
        return

    c = context
    first_row = c.last_row + 1
    last_row = c.last_row + len(project.users)

    border = fill = None
    color = c.project_colors.get(project.key)
    if color:
        border = box_border(shade_color(color, BORDER_SHADE_PERCENT))
        fill = solid_fill(color)

    for row in range(first_row, last_row + 1):
        for col_idx in range(1, c.cols_count + 1):
            cell = ws.cell(row=row, column=col_idx)
            if color:
                cell.border = border
                cell.fill = fill
            if col_idx >= c.first_date_column:
                cell.alignment = CENTER

        ws[f"{c.rate_column}{row}"].number_format = CURRENCY_FORMAT
        ws[f"{c.total_cost_column}{row}"].number_format = CURRENCY_FORMAT

    ws.conditional_formatting.add(
        f"{c.rate_column}{first_row}:{c.rate_column}{last_row}", zero_value_rule()
    )


# =============================================================================
# USER ROWS
# =============================================================================


def sum_seconds_by_date(user: User) -> dict[date, int]:
    """Total seconds per day across all of a user's issues."""
    totals: dict[date, int] = defaultdict(int)
    for issue in user.issues:
        for effort in issue.efforts:
            totals[effort.date] += effort.seconds
    return dict(sorted(totals.items()))


def find_date_column(context: LayoutContext, d: date) -> int:
    """
    Return the column whose header label matches the day.

    Raises:
        LayoutInvariantError: No column carries that label
    """
    label = format_date_label(d)
    try:
        return context.date_columns[label]
    except KeyError:
        raise LayoutInvariantError(f"No date column '{label}' for {d.isoformat()}") from None


def write_user_row(ws, context: LayoutContext, user: User, silent: bool = False) -> None:
    """
    Write one user row: details, total formulas and hours per day.

    Hours for a day with no matching column are reported and skipped.
    """
    context.last_row += 1
    row = context.last_row
    c = context

    ws[f"{c.name_column}{row}"] = user.name
    ws[f"{c.position_column}{row}"] = user.position
    ws[f"{c.rate_column}{row}"] = user.rate

    first_col = get_column_letter(c.first_date_column)
    last_col = get_column_letter(c.last_date_column)
    ws[f"{c.total_hours_column}{row}"] = f"=SUM({first_col}{row}:{last_col}{row})"
    ws[f"{c.total_cost_column}{row}"] = f"={c.rate_column}{row}*{c.total_hours_column}{row}"

    for day, seconds in sum_seconds_by_date(user).items():
        try:
            col_idx = find_date_column(context, day)
        except LayoutInvariantError as e:
            if not silent:
                print(f"    WARNING: {user.name}: {e}, {seconds_to_hours(seconds)}h skipped")
            continue
        ws.cell(row=row, column=col_idx, value=seconds_to_hours(seconds))


def write_project_block(ws, context: LayoutContext, project: Project, silent: bool = False) -> None:
    """Spacer, project total row, then one row per user."""
    if not silent:
        print(f"  Writing project {project.key} ({len(project.users)} users)")

    write_spacer_row(ws, context)
    write_project_row(ws, context, project)
    style_user_rows(ws, context, project)

    for user in project.users:
        write_user_row(ws, context, user, silent)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


def render_report(report: Report, output_path: Path, silent: bool = False) -> str:
    """
    Render the report into a period sheet of the target workbook.

    Args:
        report: Aggregated report
        output_path: Workbook to create or update
        silent: If True, suppress print statements

    Returns:
        Name of the sheet written

    Raises:
        StorageError: Workbook cannot be opened or saved
    """
    wb = open_or_create_workbook(output_path)
    sheet_name = get_sheet_name(report)
    ws = create_period_sheet(wb, sheet_name)
    context = create_layout_context(report)

    if not silent:
        print(f"Rendering sheet '{sheet_name}' ({len(report.projects)} projects)")

    write_header(ws, context, report)
    for project in report.projects:
        write_project_block(ws, context, project, silent)

    # Keep the six fixed columns and the header row in view
    ws.freeze_panes = ws.cell(row=2, column=len(REPORT_FIXED_COLUMNS) + 1)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(str(output_path))
    except OSError as e:
        raise StorageError(f"Cannot save report {output_path}: {e}") from e

    if not silent:
        print(f"Saved Excel report to: {output_path}")

    return sheet_name
