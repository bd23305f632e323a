"""Commands that load the authoritative data for the views."""

from __future__ import annotations

from typing import List

from jirareport.errors import ApiError
from jirareport.models import Issue
from jirareport.worklogs import group_worklogs_by_date

from ..messages import Command, LoadFailed, TasksLoaded, WorklogsLoaded
from ..utils.logging import log


def _newest_first(tasks: List[Issue]) -> List[Issue]:
    return sorted(tasks, key=lambda t: t.fields.updated or "", reverse=True)


def load_tasks_command(jira, username: str) -> Command:
    def command():
        try:
            user = jira.fetch_current_user()
            report = jira.fetch_in_progress_tasks(username)
            todo = jira.fetch_open_tasks(username)
            processing = jira.fetch_under_review_tasks(username) + jira.fetch_ready_for_testing_tasks(username)
        except ApiError as exc:
            log(f"Loading tasks failed: {exc}")
            return LoadFailed(what="tasks", error=exc)
        return TasksLoaded(
            user=user,
            report_tasks=report,
            todo_tasks=_newest_first(todo),
            processing_tasks=_newest_first(processing),
        )

    return command


def load_worklogs_command(tempo, account_id: str, jira=None) -> Command:
    """Recent worklogs, with issue keys filled in when a Jira client is given."""

    def command():
        try:
            worklogs = tempo.fetch_recent_worklogs(account_id)
            if jira is not None:
                worklogs = tempo.enrich_worklogs(worklogs, jira)
        except ApiError as exc:
            log(f"Loading worklogs failed: {exc}")
            return LoadFailed(what="worklogs", error=exc)
        return WorklogsLoaded(worklogs=worklogs, date_groups=group_worklogs_by_date(worklogs))

    return command
