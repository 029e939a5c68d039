"""
Deterministic project colors for the cost report.
"""

from core.config import PROJECT_COLORS
from models.report import Project


def assign_colors(projects: list[Project], palette: tuple[str, ...] = PROJECT_COLORS) -> dict[str, str]:
    """
    Map project keys to palette colors by manager.

    Distinct managers take palette colors in first-seen order, wrapping
    around when the palette runs out; projects sharing a manager share a
    color. Projects without a manager get no entry.
    """
    # manager -> palette index, in first-seen order
    manager_index: dict[str, int] = {}
    for project in projects:
        if not project.manager:
            continue
        if project.manager not in manager_index:
            manager_index[project.manager] = len(manager_index) % len(palette)

    return {
        project.key: palette[manager_index[project.manager]]
        for project in projects
        if project.manager in manager_index
    }


def shade_color(color: str, percent: int) -> str:
    """
    Darken a '#rrggbb' color by percent using per-channel integer scaling.

    Example: shade_color("#46bdc6", 10) -> "#3faab2"
    """
    if not color:
        return color

    channels = [int(color[i:i + 2], 16) for i in (1, 3, 5)]
    shaded = [max(0, value * (100 - percent) // 100) for value in channels]
    return "#" + "".join(f"{value:02x}" for value in shaded)
