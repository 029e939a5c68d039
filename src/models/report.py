"""
Report data model produced by the aggregation engine.

Project -> User -> Issue -> Effort, one Report per run.
"""

from dataclasses import dataclass, field
from datetime import date


@dataclass
class Effort:
    """Seconds one user spent on one issue on one calendar day."""

    date: date
    seconds: int


@dataclass
class Issue:
    """Issue with at most one Effort per date."""

    key: str
    efforts: list[Effort] = field(default_factory=list)


@dataclass
class User:
    account_id: str
    name: str
    position: str = ""
    rate: int = 0
    issues: list[Issue] = field(default_factory=list)


@dataclass
class Project:
    key: str
    display_name: str = ""
    owner: str = ""
    manager: str = ""
    users: list[User] = field(default_factory=list)

    @property
    def title(self) -> str:
        """Display name, or the project key when no display name is set."""
        return self.display_name or self.key


@dataclass
class Report:
    date_from: date
    date_to: date
    projects: list[Project] = field(default_factory=list)
