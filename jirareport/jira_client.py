"""
Jira API Client - fetch issues, the current user and status transitions.

Only the handful of REST v3 endpoints the daily report needs are wrapped.
Every method returns validated pydantic models and raises the ApiError
family from jirareport.errors on failure.
"""
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from .errors import DecodeError, ResponseError, TransportError
from .models.schemas import Issue, Transition, User
from .utils.logger import get_logger

logger = get_logger(__name__)

SERVICE = "jira"
TASK_FIELDS = ["key", "summary", "status", "issuetype", "priority", "description", "updated"]


class JiraClient:
    """
    Client for interacting with the Jira Cloud REST API.

    Provides methods to:
    - Get the current user
    - Fetch a single issue or a JQL search
    - List and apply status transitions
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        api_token: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Jira API client.

        Args:
            base_url: Site URL, e.g. https://acme.atlassian.net
            username: Account e-mail used for basic auth
            api_token: Atlassian API token
            timeout: Per-request timeout in seconds
            session: Optional requests session (tests inject a mock)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (username, api_token)

    @classmethod
    def from_settings(cls, settings) -> "JiraClient":
        return cls(
            settings.jira_server,
            settings.username,
            settings.api_token,
            timeout=settings.http_timeout,
        )

    def browse_url(self, issue_key: str) -> str:
        """Return the human-facing URL of an issue."""
        return f"{self.base_url}/browse/{issue_key}"

    def _request(self, method: str, endpoint: str, **kwargs) -> Optional[Any]:
        """
        Make an authenticated API request.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            **kwargs: Additional arguments for requests

        Returns:
            Decoded JSON body, or None for empty (204) responses
        """
        url = f"{self.base_url}{endpoint}"
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        logger.debug("%s %s", method, url)

        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("Jira request failed: %s %s (%s)", method, endpoint, exc)
            raise TransportError(f"{method} {endpoint} failed: {exc}", SERVICE) from exc

        if not 200 <= response.status_code < 300:
            body = response.text[:500]
            logger.warning("Jira returned %s for %s %s", response.status_code, method, endpoint)
            raise ResponseError(
                f"{method} {endpoint} returned {response.status_code}: {body}",
                SERVICE,
                status_code=response.status_code,
                body=body,
            )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Invalid JSON from {endpoint}: {exc}", SERVICE) from exc

    @staticmethod
    def _parse(model, payload, endpoint: str):
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(f"Unexpected payload from {endpoint}: {exc}", SERVICE) from exc

    def fetch_current_user(self) -> User:
        """Get the currently authenticated user."""
        endpoint = "/rest/api/3/myself"
        return self._parse(User, self._request("GET", endpoint), endpoint)

    def fetch_issue(self, issue_key: str) -> Issue:
        """
        Fetch a single issue by key or ID.

        Only the fields needed for verification and display are requested.
        """
        endpoint = f"/rest/api/3/issue/{issue_key}"
        payload = self._request("GET", endpoint, params={"fields": "key,summary,status"})
        return self._parse(Issue, payload, endpoint)

    def fetch_tasks_by_jql(self, jql: str, max_results: int = 100) -> List[Issue]:
        """Run a JQL search using POST to avoid URL length limits."""
        endpoint = "/rest/api/3/search/jql"
        body = {"jql": jql, "maxResults": max_results, "fields": TASK_FIELDS}
        payload = self._request("POST", endpoint, json=body) or {}
        return [self._parse(Issue, raw, endpoint) for raw in payload.get("issues", [])]

    def fetch_in_progress_tasks(self, username: str) -> List[Issue]:
        return self.fetch_tasks_by_jql(f"assignee = '{username}' AND status = 'In Progress'")

    def fetch_open_tasks(self, username: str) -> List[Issue]:
        return self.fetch_tasks_by_jql(
            f"assignee = '{username}' AND status IN ('Open', 'Selected for Development')"
        )

    def fetch_under_review_tasks(self, username: str) -> List[Issue]:
        return self.fetch_tasks_by_jql(f"assignee = '{username}' AND status = 'Under Review'")

    def fetch_ready_for_testing_tasks(self, username: str) -> List[Issue]:
        return self.fetch_tasks_by_jql(
            f"assignee = '{username}' AND status IN ('Ready for Testing', 'QA', 'Testing', 'To Test')"
        )

    def get_transitions(self, issue_key: str) -> List[Transition]:
        """List the status transitions currently available for an issue."""
        endpoint = f"/rest/api/3/issue/{issue_key}/transitions"
        payload: Dict[str, Any] = self._request("GET", endpoint) or {}
        return [self._parse(Transition, raw, endpoint) for raw in payload.get("transitions", [])]

    def transition_issue(self, issue_key: str, transition_id: str) -> None:
        """Apply a status transition. Jira answers 204 with no body."""
        endpoint = f"/rest/api/3/issue/{issue_key}/transitions"
        self._request("POST", endpoint, json={"transition": {"id": transition_id}})
        logger.info("Transitioned %s with transition %s", issue_key, transition_id)
