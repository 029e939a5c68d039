"""
Mutable state threaded through one spreadsheet render.
"""

from dataclasses import dataclass, field


@dataclass
class LayoutContext:
    """
    Column/row bookkeeping for a single report sheet.

    Created fresh by each render call. last_row only ever grows.
    """

    name_column: str = "A"
    manager_column: str = "B"
    position_column: str = "C"
    rate_column: str = "D"
    total_hours_column: str = "E"
    total_cost_column: str = "F"

    first_date_column: int = 0
    last_date_column: int = 0
    # "MM/DD" header label -> column index
    date_columns: dict[str, int] = field(default_factory=dict)

    cols_count: int = 0
    last_row: int = 1

    project_colors: dict[str, str] = field(default_factory=dict)
