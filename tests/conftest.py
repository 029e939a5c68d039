"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models.roster import ProjectConfig, Roster, UserConfig


def make_entry(account_id="u1", display_name="Bob Smith", issue_key="ABC-1",
               entry_date="2024-03-05", seconds=3600):
    """Raw worklog entry with overridable fields."""
    return {
        "account_id": account_id,
        "display_name": display_name,
        "issue_key": issue_key,
        "date": entry_date,
        "seconds": seconds,
    }


@pytest.fixture
def march_period():
    return date(2024, 3, 1), date(2024, 3, 31)


@pytest.fixture
def sample_entries():
    """Worklogs for two users, including a duplicate (user, issue, date) row."""
    return [
        make_entry(),
        make_entry(seconds=1800),
        make_entry(issue_key="ABC-2", entry_date="2024-03-06", seconds=7200),
        make_entry(account_id="u2", display_name="alice Jones", issue_key="ABC-1",
                   entry_date="2024-03-05", seconds=5400),
    ]


@pytest.fixture
def sample_roster():
    """Roster with one configured project."""
    return Roster(
        projects=[
            ProjectConfig(
                key="ABC",
                display_name="Alpha Build",
                owner="Olivia Owner",
                manager="Alice",
                users={
                    "Bob Smith": UserConfig(position="Developer", rate=40),
                    "Idle Ivan": UserConfig(position="QA", rate=25),
                },
            )
        ]
    )
