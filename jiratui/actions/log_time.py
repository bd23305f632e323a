"""Log work time to a Jira issue through Tempo."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from jirareport.errors import ApiError
from jirareport.models import Author, Worklog, WorklogIssue, WorklogResponse

from ..messages import ActionCompleted, ActionFailed, Command
from ..state import AppState, RefreshStrategy
from ..utils.logging import log
from .base import Action
from .context import ActionContext
from .errors import RemoteError, ValidationError
from .helpers import add_worklog, clone_state, confirm_provisional_worklog, settle_error, settle_success

# "2h", "1.5h", "30m", "2h30m"; matched from the start of the string
_TIME_RE = re.compile(r"(?:(\d+(?:\.\d+)?)h)?(?:(\d+)m)?")
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_time_string(value: str) -> int:
    """Convert a duration like '2h30m' to seconds.

    Raises ValueError for empty, unparsable or zero durations.
    """
    match = _TIME_RE.match(value.strip())
    hours, minutes = match.groups()
    total = 0
    if hours:
        total += int(float(hours) * 3600)
    if minutes:
        total += int(minutes) * 60
    if total == 0:
        raise ValueError(f"expected something like 2h, 1.5h, 30m or 2h30m, got {value!r}")
    return total


def parse_date(value: str, today: Optional[date] = None) -> str:
    """Normalize 'today', 'yesterday' or YYYY-MM-DD to YYYY-MM-DD.

    An empty value means today.
    """
    today = today or date.today()
    value = value.strip().lower()
    if value in ("", "today"):
        return today.isoformat()
    if value == "yesterday":
        return (today - timedelta(days=1)).isoformat()
    if _DATE_RE.fullmatch(value):
        try:
            return datetime.strptime(value, "%Y-%m-%d").date().isoformat()
        except ValueError:
            pass
    raise ValueError(f"use today, yesterday or YYYY-MM-DD, got {value!r}")


class LogTimeAction(Action):
    def __init__(self, time_value: str, description: str = "", date_value: str = "today", today: Optional[date] = None):
        self.time_value = time_value
        self.description = description
        self.date_value = date_value
        self._today = today
        # Resolved by validate()
        self.task_key = ""
        self.task_id = 0
        self.task_summary = ""
        self.time_seconds = 0
        self.date = ""
        self.account_id = ""

    def name(self) -> str:
        return "Log Time"

    def validate(self, ctx: ActionContext) -> None:
        if not ctx.has_selected_task():
            raise ValidationError("no task selected")

        try:
            seconds = parse_time_string(self.time_value)
        except ValueError as exc:
            raise ValidationError(f"invalid time format: {exc}") from exc
        try:
            normalized = parse_date(self.date_value, today=self._today)
        except ValueError as exc:
            raise ValidationError(f"invalid date: {exc}") from exc

        if not ctx.user_account_id:
            raise ValidationError("user account ID not available")
        try:
            task_id = int(ctx.task_id)
        except ValueError:
            raise ValidationError(f"invalid issue ID: {ctx.task_id!r}") from None
        if ctx.clients.tempo is None:
            raise ValidationError("Tempo client not configured")

        self.task_key = ctx.task_key
        self.task_id = task_id
        self.task_summary = ctx.selected_task.fields.summary
        self.time_seconds = seconds
        self.date = normalized
        self.account_id = ctx.user_account_id

    def execute(self, ctx: ActionContext) -> Command:
        tempo = ctx.clients.tempo
        task_key, time_value = self.task_key, self.time_value
        args = (self.task_id, self.time_seconds, self.date, self.description, self.account_id)

        def command():
            try:
                worklog = tempo.create_worklog(*args)
            except ApiError as exc:
                return ActionFailed(
                    action_name=self.name(),
                    error=RemoteError(f"failed to log time: {exc}", retryable=True),
                    retryable=True,
                    action=self,
                )
            except Exception as exc:
                log(f"Unexpected error logging time to {task_key}: {exc}", logging.ERROR)
                return ActionFailed(
                    action_name=self.name(),
                    error=RemoteError(f"failed to log time: {exc}", retryable=False),
                    retryable=False,
                    action=self,
                )
            return ActionCompleted(
                action_name=self.name(),
                action=self,
                result={
                    "worklog": worklog,
                    "task_key": task_key,
                    "time": time_value,
                    "message": f"Logged {time_value} to {task_key}",
                },
            )

        return command

    def optimistic_update(self, state: AppState) -> AppState:
        new_state = clone_state(state)
        provisional = Worklog(
            issue=WorklogIssue(id=self.task_id, key=self.task_key, summary=self.task_summary),
            time_spent_seconds=self.time_seconds,
            start_date=self.date,
            description=self.description,
            author=Author(account_id=self.account_id),
        )
        add_worklog(new_state, provisional)
        new_state.status_message = f"Logging {self.time_value} to {self.task_key}..."
        return new_state

    def on_success(self, state: AppState, result: Any) -> AppState:
        message = f"Logged {self.time_value} to {self.task_key}"
        if isinstance(result, dict):
            message = result.get("message", message)
            created = result.get("worklog")
            if isinstance(created, WorklogResponse):
                confirm_provisional_worklog(
                    state, self.task_key, self.time_seconds, self.date, created.tempo_worklog_id
                )
        return settle_success(state, message)

    def on_error(self, state: AppState, error: Exception) -> AppState:
        return settle_error(state, f"Failed to log time: {error}")

    def get_refresh_strategy(self) -> RefreshStrategy:
        return RefreshStrategy.POLLING
