"""
Worklog fetching from the Tempo REST API.
"""

from datetime import date

import requests
from pydantic import ValidationError

from core.config import TEMPO_PAGE_LIMIT, TEMPO_TIMEOUT_SECONDS, TEMPO_URL
from core.errors import DataSourceError, ParseError
from models.tempo import RawEntry, TempoResponse, TempoWorklog


def to_raw_entry(worklog: TempoWorklog) -> RawEntry:
    """Flatten a Tempo worklog for the aggregation engine."""
    return {
        "account_id": worklog.author.account_id,
        "display_name": worklog.author.display_name,
        "issue_key": worklog.issue.key,
        "date": worklog.start_date,
        "seconds": worklog.time_spent_seconds,
    }


class TempoClient:
    """Reads worklogs of one project at a time, following pagination."""

    def __init__(
        self,
        base_url: str = TEMPO_URL,
        page_limit: int = TEMPO_PAGE_LIMIT,
        timeout: int = TEMPO_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        silent: bool = False,
    ):
        self.worklogs_url = f"{base_url.rstrip('/')}/core/3/worklogs"
        self.page_limit = page_limit
        self.timeout = timeout
        self.session = session or requests.Session()
        self.silent = silent

    def fetch_page(
        self, token: str, project_key: str, date_from: date, date_to: date, offset: int
    ) -> TempoResponse:
        """
        Fetch one page of worklogs.

        Raises:
            DataSourceError: Transport failure, non-200 status or non-JSON body
            ParseError: Body doesn't match the worklog schema
        """
        params = {
            "project": project_key,
            "from": date_from.isoformat(),
            "to": date_to.isoformat(),
            "offset": offset,
            "limit": self.page_limit,
        }
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        try:
            response = self.session.get(
                self.worklogs_url, params=params, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise DataSourceError(f"Tempo request failed for {project_key}: {e}") from e

        if response.status_code != 200:
            raise DataSourceError(
                f"Tempo error for {project_key}: {response.status_code} {response.reason}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise DataSourceError(f"Tempo returned invalid JSON for {project_key}") from e

        try:
            return TempoResponse.model_validate(payload)
        except ValidationError as e:
            raise ParseError(f"Unexpected Tempo response for {project_key}: {e}") from e

    def fetch_worklogs(
        self, token: str, project_key: str, date_from: date, date_to: date
    ) -> list[RawEntry]:
        """
        Fetch all worklogs of a project in the period.

        Pages are requested until a short page comes back. Worklogs seen on
        an earlier page are dropped.
        """
        entries: list[RawEntry] = []
        seen_ids: set[int] = set()
        offset = 0

        while True:
            page = self.fetch_page(token, project_key, date_from, date_to, offset)

            for worklog in page.results:
                worklog_id = worklog.tempo_worklog_id
                if worklog_id is not None:
                    if worklog_id in seen_ids:
                        continue
                    seen_ids.add(worklog_id)
                entries.append(to_raw_entry(worklog))

            if not self.silent:
                print(f"    Fetched {page.metadata.count} records for {project_key}")

            if page.metadata.count == 0 or page.metadata.count < page.metadata.limit:
                break
            offset = page.metadata.offset + page.metadata.count

        return entries
