"""
Cell styles shared by the cost report and the roster store.
"""

from openpyxl.formatting.rule import CellIsRule
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from core.config import (
    HEADER_FILL_COLOR,
    HEADER_FONT_COLOR,
    ZERO_VALUE_FILL_COLOR,
    ZERO_VALUE_FONT_COLOR,
)

BOLD = Font(bold=True)
CENTER = Alignment(horizontal="center")


def argb(color: str) -> str:
    """Convert '#rrggbb' (or 'rrggbb') to the 'FFRRGGBB' form openpyxl stores."""
    return "FF" + color.lstrip("#").upper()


def solid_fill(color: str) -> PatternFill:
    return PatternFill(fill_type="solid", start_color=argb(color), end_color=argb(color))


def box_border(color: str, bottom_color: str | None = None) -> Border:
    """Thin border on all four sides, optionally with a different bottom."""
    side = Side(style="thin", color=argb(color))
    bottom = Side(style="thin", color=argb(bottom_color)) if bottom_color else side
    return Border(left=side, right=side, top=side, bottom=bottom)


def header_style(cell) -> None:
    """White bold text on green, boxed and centered (roster store headers)."""
    cell.font = Font(bold=True, color=argb(HEADER_FONT_COLOR))
    cell.fill = solid_fill(HEADER_FILL_COLOR)
    cell.border = box_border("000000")
    cell.alignment = CENTER


def zero_value_rule() -> CellIsRule:
    """Conditional format flagging a numeric cell equal to 0 (red text, pink fill)."""
    return CellIsRule(
        operator="equal",
        formula=["0"],
        font=Font(color=argb(ZERO_VALUE_FONT_COLOR)),
        fill=PatternFill(
            fill_type="solid",
            start_color=argb(ZERO_VALUE_FILL_COLOR),
            end_color=argb(ZERO_VALUE_FILL_COLOR),
        ),
    )
