"""
Tempo API Client - search and create worklogs.

Tempo authenticates with its own bearer token, separate from the Jira
basic-auth credentials.
"""
from datetime import date, timedelta
from typing import List, Optional

import requests
from pydantic import ValidationError

from .errors import DecodeError, ResponseError, TransportError
from .models.schemas import Worklog, WorklogRequest, WorklogResponse
from .utils.logger import get_logger

TEMPO_API_BASE = "https://api.tempo.io/4"
SERVICE = "tempo"

# 10 calendar days covers the last 6 working days
RECENT_WINDOW_DAYS = 10

logger = get_logger(__name__)


class TempoClient:
    """Client for the Tempo worklog API."""

    def __init__(
        self,
        api_token: str,
        base_url: str = TEMPO_API_BASE,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings) -> "TempoClient":
        return cls(settings.tempo_api_token, timeout=settings.http_timeout)

    def _get_headers(self) -> dict:
        """Get authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(self, method: str, endpoint: str, **kwargs) -> dict:
        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method, url, headers=self._get_headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            logger.warning("Tempo request failed: %s %s (%s)", method, endpoint, exc)
            raise TransportError(f"{method} {endpoint} failed: {exc}", SERVICE) from exc

        if response.status_code not in (200, 201):
            body = response.text[:500]
            logger.warning("Tempo returned %s for %s %s", response.status_code, method, endpoint)
            raise ResponseError(
                f"tempo API returned status {response.status_code}",
                SERVICE,
                status_code=response.status_code,
                body=body,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Invalid JSON from {endpoint}: {exc}", SERVICE) from exc

    def fetch_worklogs(self, account_id: str, start_date: str, end_date: str) -> List[Worklog]:
        """
        Search worklogs authored by an account within a date range.

        Args:
            account_id: Jira account ID of the author
            start_date: First day, YYYY-MM-DD (inclusive)
            end_date: Last day, YYYY-MM-DD (inclusive)
        """
        body = {
            "authorIds": [account_id],
            "from": start_date,
            "to": end_date,
            "limit": 100,
        }
        payload = self._request("POST", "/worklogs/search", json=body)
        try:
            return [Worklog.model_validate(raw) for raw in payload.get("results", [])]
        except ValidationError as exc:
            raise DecodeError(f"Unexpected worklog payload: {exc}", SERVICE) from exc

    def fetch_recent_worklogs(self, account_id: str, today: Optional[date] = None) -> List[Worklog]:
        """Worklogs for the last RECENT_WINDOW_DAYS calendar days."""
        end = today or date.today()
        start = end - timedelta(days=RECENT_WINDOW_DAYS)
        return self.fetch_worklogs(account_id, start.isoformat(), end.isoformat())

    def enrich_worklogs(self, worklogs: List[Worklog], jira) -> List[Worklog]:
        """
        Fill in issue key and summary, which Tempo search results leave out.

        Tempo only names the issue by id, so each distinct id is looked up
        once through the Jira client. Any ApiError from Jira propagates.

        Args:
            worklogs: Worklogs as returned by fetch_worklogs
            jira: A JiraClient (anything with fetch_issue)

        Returns:
            New worklog copies; the input list is not modified
        """
        issues = {}
        for log in worklogs:
            if log.issue.id and log.issue.id not in issues:
                issues[log.issue.id] = jira.fetch_issue(str(log.issue.id))

        enriched = []
        for log in worklogs:
            issue = issues.get(log.issue.id)
            if issue is None:
                enriched.append(log)
                continue
            details = log.issue.model_copy(update={"key": issue.key, "summary": issue.fields.summary})
            enriched.append(log.model_copy(update={"issue": details}))
        logger.debug("Enriched %d worklogs from %d issues", len(worklogs), len(issues))
        return enriched

    def create_worklog(
        self,
        issue_id: int,
        time_spent_seconds: int,
        start_date: str,
        description: str,
        author_account_id: str,
    ) -> WorklogResponse:
        """Create a worklog entry and return Tempo's record of it."""
        try:
            request = WorklogRequest(
                issue_id=issue_id,
                time_spent_seconds=time_spent_seconds,
                start_date=start_date,
                description=description,
                author_account_id=author_account_id,
            )
        except ValidationError as exc:
            raise DecodeError(f"Invalid worklog request: {exc}", SERVICE) from exc

        payload = self._request("POST", "/worklogs", json=request.model_dump(by_alias=True))
        try:
            created = WorklogResponse.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(f"Failed to decode worklog response: {exc}", SERVICE) from exc
        logger.info(
            "Created Tempo worklog %s: %ss on %s",
            created.tempo_worklog_id, time_spent_seconds, start_date,
        )
        return created
