"""Checks that an action's remote effect is visible on read.

A successful mutation response does not mean the next search or fetch
returns the new value, so each polling action gets a verifier that reads
the remote side once per call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Optional

from jirareport.errors import ApiError
from jirareport.models import Worklog
from jirareport.tempo_client import RECENT_WINDOW_DAYS

from ..actions.base import Action
from ..actions.change_status import ChangeStatusAction
from ..actions.errors import VerificationError
from ..actions.log_time import LogTimeAction
from ..services.clients import Clients
from ..state import RefreshStrategy


class Verifier(ABC):
    @abstractmethod
    def verify(self, clients: Clients) -> bool:
        """True once the change is observable.

        Raises VerificationError when the read itself fails.
        """


class NoOpVerifier(Verifier):
    """Always observed, never calls out."""

    def verify(self, clients: Clients) -> bool:
        return True


class StatusChangeVerifier(Verifier):
    def __init__(self, task_key: str, target_status: str):
        self.task_key = task_key
        self.target_status = target_status

    def verify(self, clients: Clients) -> bool:
        if clients.jira is None:
            raise VerificationError("Jira client not configured")
        try:
            issue = clients.jira.fetch_issue(self.task_key)
        except ApiError as exc:
            raise VerificationError(f"failed to fetch {self.task_key}: {exc}") from exc
        return issue.status_name == self.target_status


class LogTimeVerifier(Verifier):
    """Looks for a worklog with the exact issue, duration and date.

    Tempo search results carry only the numeric issue id, so the issue
    matches on id when one is known and on key otherwise. The search window
    is the recent window, stretched back to the logged date when that is
    older.
    """

    def __init__(
        self,
        task_key: str,
        time_seconds: int,
        date_str: str,
        account_id: str,
        issue_id: int = 0,
        today: Optional[date] = None,
    ):
        self.task_key = task_key
        self.time_seconds = time_seconds
        self.date = date_str
        self.account_id = account_id
        self.issue_id = issue_id
        self._today = today

    def _window(self):
        end = self._today or date.today()
        start = end - timedelta(days=RECENT_WINDOW_DAYS)
        logged = date.fromisoformat(self.date)
        return min(start, logged), max(end, logged)

    def _same_issue(self, worklog: Worklog) -> bool:
        if self.issue_id and worklog.issue.id:
            return worklog.issue.id == self.issue_id
        return worklog.issue.key == self.task_key

    def verify(self, clients: Clients) -> bool:
        if clients.tempo is None:
            raise VerificationError("Tempo client not configured")
        start, end = self._window()
        try:
            worklogs = clients.tempo.fetch_worklogs(self.account_id, start.isoformat(), end.isoformat())
        except ApiError as exc:
            raise VerificationError(f"failed to fetch worklogs: {exc}") from exc
        return any(
            self._same_issue(w)
            and w.time_spent_seconds == self.time_seconds
            and w.start_date == self.date
            for w in worklogs
        )


def get_verifier(action: Action) -> Verifier:
    """Pick the verifier for an action that has run validate()."""
    if action.get_refresh_strategy() != RefreshStrategy.POLLING:
        return NoOpVerifier()
    if isinstance(action, ChangeStatusAction):
        return StatusChangeVerifier(action.task_key, action.target_status)
    if isinstance(action, LogTimeAction):
        return LogTimeVerifier(
            action.task_key, action.time_seconds, action.date, action.account_id, issue_id=action.task_id
        )
    return NoOpVerifier()
