"""Shared fixtures: settings, mocked Jira/Tempo clients and a loaded state."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from jirareport.config import Settings
from jirareport.jira_client import JiraClient
from jirareport.models import Issue, IssueFields, Status, User, Worklog, WorklogIssue, WorklogResponse
from jirareport.tempo_client import TempoClient
from jiratui.app import DailyReportApp
from jiratui.services.clients import Clients
from jiratui.state import AppState, PanelType
from jiratui.utils.async_tasks import run_inline

TODAY = date(2024, 1, 15)


def make_issue(key, status="In Progress", issue_id="10001", summary="Fix the thing", updated=""):
    return Issue(
        id=issue_id,
        key=key,
        fields=IssueFields(summary=summary, status=Status(name=status), updated=updated),
    )


def make_worklog(key="KEY-1", seconds=3600, start_date="2024-01-15", worklog_id=1, issue_id=10001):
    return Worklog(
        tempo_worklog_id=worklog_id,
        issue=WorklogIssue(id=issue_id, key=key),
        time_spent_seconds=seconds,
        start_date=start_date,
    )


@pytest.fixture
def settings():
    return Settings(
        jira_server="https://acme.atlassian.net",
        username="dev@acme.test",
        api_token="jira-token",
        account_id="acc-1",
        tempo_api_token="tempo-token",
        poll_max_attempts=3,
    )


@pytest.fixture
def jira():
    client = MagicMock(spec=JiraClient)
    client.fetch_current_user.return_value = User(account_id="acc-1", display_name="Dev")
    client.fetch_in_progress_tasks.return_value = [make_issue("KEY-1", issue_id="10001")]
    client.fetch_open_tasks.return_value = [make_issue("KEY-2", status="To Do", issue_id="10002")]
    client.fetch_under_review_tasks.return_value = []
    client.fetch_ready_for_testing_tasks.return_value = []
    client.transition_issue.return_value = None
    return client


@pytest.fixture
def tempo():
    client = MagicMock(spec=TempoClient)
    client.fetch_recent_worklogs.return_value = []
    client.fetch_worklogs.return_value = []
    client.enrich_worklogs.side_effect = lambda worklogs, jira: worklogs
    client.create_worklog.return_value = WorklogResponse(
        tempo_worklog_id=555,
        issue=WorklogIssue(id=10001, key="KEY-1"),
        time_spent_seconds=9000,
        start_date="2024-01-15",
    )
    return client


@pytest.fixture
def clipboard():
    return MagicMock(return_value=None)


@pytest.fixture
def browser():
    return MagicMock(return_value=True)


@pytest.fixture
def clients(jira, tempo, clipboard, browser):
    return Clients(jira=jira, tempo=tempo, clipboard=clipboard, open_browser=browser)


@pytest.fixture
def state():
    """State with KEY-1 in progress and KEY-2 in the todo panel."""
    return AppState(
        user=User(account_id="acc-1", display_name="Dev"),
        report_tasks=[make_issue("KEY-1", issue_id="10001", summary="Fix the thing")],
        todo_tasks=[make_issue("KEY-2", status="To Do", issue_id="10002", summary="Plan the other thing")],
        processing_tasks=[],
        worklogs=[make_worklog(key="KEY-2", seconds=1800, start_date="2024-01-14")],
        active_panel=PanelType.REPORT,
        loading=False,
        status_message="Ready",
    )


@pytest.fixture
def sleeps():
    """Records requested delays instead of sleeping."""
    return []


@pytest.fixture
def app(settings, clients, state, sleeps):
    app = DailyReportApp(
        settings,
        clients,
        runner=run_inline,
        sleep=sleeps.append,
        output=lambda text: None,
    )
    app.state = state
    return app
