#!/usr/bin/env python3
"""
Create the monthly project cost report from Tempo worklogs.

Fetches worklogs for every configured project, merges them with the
roster (positions and rates), writes the month's sheet into the report
workbook and synchronizes the roster.

Usage:
    uv run python src/scripts/create_cost_report.py 3
    uv run python src/scripts/create_cost_report.py march 2024
"""

import argparse
import calendar
import sys
from datetime import date, datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import REPORT_PATH, ROSTER_PATH, TEMPO_TOKENS, parse_token_projects
from core.errors import InputError, ReportError
from services.cost_report import create_cost_report


# =============================================================================
# DATE UTILITIES
# =============================================================================


def parse_month(value: str) -> int:
    """
    Parse a month given as a number ('3', '03') or name ('mar', 'March').

    Raises:
        InputError: If the month is not recognized
    """
    candidate = value.strip()

    if candidate.isdigit():
        month = int(candidate)
        if 1 <= month <= 12:
            return month
        raise InputError(f"Month is not recognized: {value}")

    for fmt in ("%b", "%B"):
        try:
            return datetime.strptime(candidate.title(), fmt).month
        except ValueError:
            continue
    raise InputError(f"Month is not recognized: {value}")


def parse_year(value: str | None) -> int:
    """Parse a 4-digit year, defaulting to the current year."""
    if value is None:
        return date.today().year

    candidate = value.strip()
    if len(candidate) != 4 or not candidate.isdigit():
        raise InputError(f"Year is not recognized: {value}")
    return int(candidate)


def get_monthly_date_range(month: int, year: int) -> tuple[date, date]:
    """
    Calculate date range for a monthly report.

    Returns:
        Tuple of (first_of_month, last_of_month)
    """
    _, last_day = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, last_day)


# =============================================================================
# MAIN
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the cost report."""
    parser = argparse.ArgumentParser(description="Generate monthly project cost report")
    parser.add_argument("month", help="Month as number (3) or name (mar, March)")
    parser.add_argument("year", nargs="?", help="Year (YYYY). Defaults to current year.")
    args = parser.parse_args(argv)

    try:
        start_date, end_date = get_monthly_date_range(
            parse_month(args.month), parse_year(args.year)
        )
        print(f"Generating cost report for {start_date} to {end_date}")

        tokens = parse_token_projects(TEMPO_TOKENS)
        result = create_cost_report(
            start_date,
            end_date,
            tokens,
            roster_path=ROSTER_PATH,
            report_path=REPORT_PATH,
        )
    except ReportError as e:
        print(f"\nError: {e}")
        return 1

    print(f"\nSheet '{result.sheet_name}' written to {result.report_path}")
    print("\nDone!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
