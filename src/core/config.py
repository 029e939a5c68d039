"""
Configuration constants and environment setup.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from core.errors import InputError

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
OUTPUT_DIR = PROJECT_ROOT / "output"

ROSTER_PATH = Path(os.environ.get("PROJECT_CONFIG_FILE", str(DATA_DIR / "ProjectConfig.xlsx")))
REPORT_PATH = Path(os.environ.get("REPORT_FILE", str(OUTPUT_DIR / "Report.xlsx")))

# =============================================================================
# TEMPO CONFIGURATION
# =============================================================================

TEMPO_URL = os.environ.get("TEMPO_URL", "https://api.tempo.io").rstrip("/")
# e.g. "token-a=ABC,DEF;token-b=XYZ"
TEMPO_TOKENS = os.environ.get("TEMPO_TOKENS", "")
TEMPO_PAGE_LIMIT = int(os.environ.get("TEMPO_PAGE_LIMIT", "100"))
TEMPO_TIMEOUT_SECONDS = int(os.environ.get("TEMPO_TIMEOUT_SECONDS", "60"))

# =============================================================================
# ROSTER CONFIGURATION
# =============================================================================

# Keep roster sheets of projects that are no longer part of the report
ROSTER_KEEP_INACTIVE_PROJECTS = (
    os.environ.get("ROSTER_KEEP_INACTIVE_PROJECTS", "false").lower() == "true"
)

ROSTER_INFO_HEADER = "Project Info"
ROSTER_INFO_ROWS = {
    "key": 2,
    "display_name": 3,
    "owner": 4,
    "manager": 5,
}
ROSTER_INFO_LABELS = {
    "key": "Key",
    "display_name": "Display Name",
    "owner": "Owner",
    "manager": "Manager",
}
ROSTER_USER_HEADER_ROW = 7
ROSTER_USER_HEADERS = ["Name", "Position", "Rate"]
ROSTER_COLUMN_WIDTHS = {"A": 30, "B": 30, "C": 10}

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

# Fixed columns: (header, width)
REPORT_FIXED_COLUMNS = [
    ("Name", 25),
    ("Manager", 25),
    ("Position", 25),
    ("Rate", 9),
    ("Total hours", 12),
    ("Total cost", 12),
]
DATE_COLUMN_WIDTH = 6
DATE_LABEL_FORMAT = "%m/%d"

# Manager colors, assigned in first-seen order
PROJECT_COLORS = ("#46bdc6", "#92d050", "#b6d7a8", "#d9ead3")
BORDER_SHADE_PERCENT = 15
FILL_SHADE_PERCENT = 10

HEADER_FILL_COLOR = "009A00"
HEADER_FONT_COLOR = "FFFFFF"
WEEKEND_FILL_COLOR = "FEC7CE"
ZERO_VALUE_FONT_COLOR = "9A0511"
ZERO_VALUE_FILL_COLOR = "FEC7CE"
PROJECT_BOTTOM_BORDER_COLOR = "444444"
SPACER_BORDER_COLOR = "FFFFFF"

CURRENCY_FORMAT = os.environ.get("CURRENCY_NUMBER_FORMAT", '"$"#,##0')


# =============================================================================
# TOKEN PARSING
# =============================================================================


@dataclass
class TokenProjects:
    """A Tempo API token and the project keys it may read."""

    token: str
    project_keys: list[str]


def parse_token_projects(value: str) -> list[TokenProjects]:
    """
    Parse the TEMPO_TOKENS setting.

    Entries are separated by ';' and look like '<token>=<KEY1>,<KEY2>'.
    The token is split off at the last '=' so base64 padding survives.

    Raises:
        InputError: If the value is empty or an entry is malformed
    """
    result = []
    for entry in value.split(";"):
        entry = entry.strip()
        if not entry:
            continue

        token, sep, keys = entry.rpartition("=")
        token = token.strip()
        project_keys = [key.strip() for key in keys.split(",") if key.strip()]
        if not sep or not token or not project_keys:
            raise InputError(f"Malformed TEMPO_TOKENS entry: '{entry}'")

        result.append(TokenProjects(token=token, project_keys=project_keys))

    if not result:
        raise InputError("TEMPO_TOKENS is not configured")
    return result
