"""
Tempo worklog API models.

Pydantic models validate the JSON wire format; RawEntry is the flat
record handed to the aggregation engine.
"""

from typing import TypedDict

from pydantic import BaseModel, ConfigDict, Field


class TempoAuthor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(alias="accountId")
    display_name: str = Field(default="", alias="displayName")


class TempoIssue(BaseModel):
    key: str


class TempoWorklog(BaseModel):
    """One worklog from /core/3/worklogs."""

    model_config = ConfigDict(populate_by_name=True)

    tempo_worklog_id: int | None = Field(default=None, alias="tempoWorklogId")
    issue: TempoIssue
    author: TempoAuthor
    start_date: str = Field(alias="startDate")  # YYYY-MM-DD
    time_spent_seconds: int = Field(alias="timeSpentSeconds", ge=0)


class TempoMetadata(BaseModel):
    count: int
    offset: int = 0
    limit: int


class TempoResponse(BaseModel):
    metadata: TempoMetadata
    results: list[TempoWorklog] = []


class RawEntry(TypedDict):
    """Flattened worklog."""
    account_id: str
    display_name: str
    issue_key: str
    date: str  # YYYY-MM-DD
    seconds: int
