"""
Roster data model: per-project user positions and hourly rates.
"""

from dataclasses import dataclass, field


@dataclass
class UserConfig:
    position: str = ""
    rate: int = 0


@dataclass
class ProjectConfig:
    """Roster entry for one project, users keyed by display name."""

    key: str
    display_name: str = ""
    owner: str = ""
    manager: str = ""
    users: dict[str, UserConfig] = field(default_factory=dict)


@dataclass
class Roster:
    projects: list[ProjectConfig] = field(default_factory=list)

    def get(self, project_key: str) -> ProjectConfig | None:
        """Return the roster entry for a project key, or None."""
        for project in self.projects:
            if project.key == project_key:
                return project
        return None
