"""Tests for the four action kinds."""

from dataclasses import replace
from unittest.mock import patch

import pytest

from jirareport.errors import ResponseError, TransportError
from jirareport.models import WorklogResponse
from jiratui.actions import (
    ActionExecutor,
    ChangeStatusAction,
    CopyAction,
    CopyFormat,
    LogTimeAction,
    OpenURLAction,
    RemoteError,
    ValidationError,
    build_action_context,
    panel_for_status,
)
from jiratui.actions.helpers import clone_state, save_state_snapshot
from jiratui.messages import ActionCompleted, ActionFailed
from jiratui.services.clients import Clients
from jiratui.services.clipboard import ClipboardError
from jiratui.state import AppState, PanelType, RefreshStrategy

from conftest import TODAY


def _ctx(state, clients, settings):
    return build_action_context(state, clients, settings)


ALL_ACTIONS = [
    lambda: ChangeStatusAction("In Review", "31"),
    lambda: LogTimeAction("1h", today=TODAY),
    lambda: CopyAction(CopyFormat.KEY),
    lambda: OpenURLAction(),
]


class TestValidationGate:
    """A failed validate() never reaches execute(), for every kind."""

    @pytest.mark.parametrize("factory", ALL_ACTIONS)
    def test_no_selection_never_executes(self, factory, clients, settings):
        action = factory()
        ctx = _ctx(AppState(), clients, settings)

        with patch.object(action, "execute") as execute:
            message = ActionExecutor().execute_action(action, ctx)()

        assert isinstance(message, ActionFailed)
        execute.assert_not_called()

    @pytest.mark.parametrize("factory", ALL_ACTIONS)
    def test_validate_does_not_touch_clients(self, factory, state, clients, settings, jira, tempo, clipboard, browser):
        factory().validate(_ctx(state, clients, settings))
        assert jira.method_calls == []
        assert tempo.method_calls == []
        clipboard.assert_not_called()
        browser.assert_not_called()


class TestChangeStatus:
    def test_validate_resolves_panels(self, state, clients, settings):
        action = ChangeStatusAction("Under Review", "31")
        action.validate(_ctx(state, clients, settings))

        assert action.task_key == "KEY-1"
        assert action.current_status == "In Progress"
        assert action.source_panel == PanelType.REPORT
        assert action.target_panel == PanelType.PROCESSING

    @pytest.mark.parametrize("target,transition", [("", "31"), ("Done", "")])
    def test_missing_arguments(self, state, clients, settings, target, transition):
        with pytest.raises(ValidationError):
            ChangeStatusAction(target, transition).validate(_ctx(state, clients, settings))

    def test_missing_jira_client(self, state, settings):
        with pytest.raises(ValidationError):
            ChangeStatusAction("Done", "41").validate(_ctx(state, Clients(), settings))

    def test_optimistic_update_leaves_input_untouched(self, state, clients, settings):
        action = ChangeStatusAction("Under Review", "31")
        action.validate(_ctx(state, clients, settings))
        before = clone_state(state)

        updated = action.optimistic_update(state)

        assert state.report_tasks == before.report_tasks
        assert updated.report_tasks == []
        assert updated.processing_tasks[0].status_name == "Under Review"
        assert updated.status_message == "Changing status to Under Review..."

    def test_execute_success(self, state, clients, settings, jira):
        action = ChangeStatusAction("In Progress", "21")
        ctx = _ctx(state, clients, settings)
        action.validate(ctx)

        message = action.execute(ctx)()

        assert isinstance(message, ActionCompleted)
        jira.transition_issue.assert_called_once_with("KEY-1", "21")
        assert message.result["task_key"] == "KEY-1"

    def test_execute_failure_is_retryable(self, state, clients, settings, jira):
        jira.transition_issue.side_effect = ResponseError("400", "jira", status_code=400)
        action = ChangeStatusAction("Done", "41")
        ctx = _ctx(state, clients, settings)
        action.validate(ctx)

        message = action.execute(ctx)()

        assert isinstance(message, ActionFailed)
        assert isinstance(message.error, RemoteError)
        assert message.retryable

    def test_on_error_rolls_back(self, state, clients, settings):
        action = ChangeStatusAction("Under Review", "31")
        action.validate(_ctx(state, clients, settings))
        state.snapshot = save_state_snapshot(state)
        updated = action.optimistic_update(state)

        settled = action.on_error(updated, RemoteError("boom"))

        assert [t.key for t in settled.report_tasks] == ["KEY-1"]
        assert settled.report_tasks[0].status_name == "In Progress"
        assert settled.snapshot is None
        assert settled.status_message.startswith("Failed to change status")

    def test_polling_strategy(self):
        assert ChangeStatusAction("Done", "41").get_refresh_strategy() == RefreshStrategy.POLLING


class TestPanelForStatus:
    @pytest.mark.parametrize(
        "status,panel",
        [
            ("To Do", PanelType.TODO),
            ("Selected for Development", PanelType.TODO),
            ("In Progress", PanelType.REPORT),
            ("Under Review", PanelType.PROCESSING),
            ("Ready for Testing", PanelType.PROCESSING),
        ],
    )
    def test_known_statuses(self, status, panel):
        assert panel_for_status(status, PanelType.REPORT) == panel

    def test_unknown_keeps_default(self):
        assert panel_for_status("Done", PanelType.TODO) == PanelType.TODO


class TestLogTime:
    def test_validate_scenario(self, state, clients, settings):
        action = LogTimeAction("2h30m", date_value="2024-01-15", today=TODAY)
        action.validate(_ctx(state, clients, settings))

        assert action.time_seconds == 9000
        assert action.date == "2024-01-15"
        assert action.task_key == "KEY-1"
        assert action.task_id == 10001
        assert action.account_id == "acc-1"

    @pytest.mark.parametrize("time_value,date_value", [("soon", "today"), ("1h", "next week")])
    def test_bad_input(self, state, clients, settings, time_value, date_value):
        with pytest.raises(ValidationError):
            LogTimeAction(time_value, date_value=date_value, today=TODAY).validate(_ctx(state, clients, settings))

    def test_missing_account(self, state, clients, settings):
        state.user = None
        settings = replace(settings, account_id="")
        with pytest.raises(ValidationError):
            LogTimeAction("1h", today=TODAY).validate(_ctx(state, clients, settings))

    def test_account_falls_back_to_settings(self, state, clients, settings):
        state.user = None
        action = LogTimeAction("1h", today=TODAY)
        action.validate(_ctx(state, clients, settings))
        assert action.account_id == "acc-1"

    def test_optimistic_worklog_is_provisional(self, state, clients, settings):
        action = LogTimeAction("2h30m", description="pairing", date_value="2024-01-15", today=TODAY)
        action.validate(_ctx(state, clients, settings))

        updated = action.optimistic_update(state)

        assert len(state.worklogs) == 1
        added = updated.worklogs[0]
        assert added.is_provisional
        assert (added.issue.key, added.time_spent_seconds, added.start_date) == ("KEY-1", 9000, "2024-01-15")
        assert updated.date_groups[0].date == "2024-01-15"
        assert updated.date_groups[0].total_seconds == 9000

    def test_execute_and_confirm(self, state, clients, settings, tempo):
        action = LogTimeAction("2h30m", description="pairing", date_value="2024-01-15", today=TODAY)
        ctx = _ctx(state, clients, settings)
        action.validate(ctx)
        updated = action.optimistic_update(state)

        message = action.execute(ctx)()
        settled = action.on_success(updated, message.result)

        tempo.create_worklog.assert_called_once_with(10001, 9000, "2024-01-15", "pairing", "acc-1")
        assert isinstance(message.result["worklog"], WorklogResponse)
        assert settled.worklogs[0].tempo_worklog_id == 555
        assert settled.status_message == "Logged 2h30m to KEY-1"

    def test_execute_failure(self, state, clients, settings, tempo):
        tempo.create_worklog.side_effect = TransportError("timeout", "tempo")
        action = LogTimeAction("1h", today=TODAY)
        ctx = _ctx(state, clients, settings)
        action.validate(ctx)

        message = action.execute(ctx)()

        assert isinstance(message, ActionFailed)
        assert message.retryable


class TestCopy:
    @pytest.mark.parametrize(
        "copy_format,expected",
        [
            (CopyFormat.KEY, "KEY-1"),
            (CopyFormat.URL, "https://acme.atlassian.net/browse/KEY-1"),
            (CopyFormat.FORMATTED, "[KEY-1] Fix the thing"),
            (CopyFormat.MARKDOWN, "[KEY-1](https://acme.atlassian.net/browse/KEY-1) - Fix the thing"),
        ],
    )
    def test_content(self, state, clients, settings, clipboard, copy_format, expected):
        action = CopyAction(copy_format)
        ctx = _ctx(state, clients, settings)
        action.validate(ctx)

        message = action.execute(ctx)()

        assert isinstance(message, ActionCompleted)
        clipboard.assert_called_once_with(expected)

    def test_clipboard_failure_not_retryable(self, state, clients, settings, clipboard):
        clipboard.side_effect = ClipboardError("no display")
        action = CopyAction()
        ctx = _ctx(state, clients, settings)
        action.validate(ctx)

        message = action.execute(ctx)()

        assert isinstance(message, ActionFailed)
        assert not message.retryable

    def test_optimistic_update_changes_nothing(self, state):
        before = clone_state(state)
        updated = CopyAction().optimistic_update(state)
        assert updated.report_tasks == before.report_tasks
        assert updated.worklogs == before.worklogs

    def test_immediate_strategy(self):
        assert CopyAction().get_refresh_strategy() == RefreshStrategy.IMMEDIATE


class TestOpenURL:
    def test_opens_browse_url(self, state, clients, settings, browser):
        action = OpenURLAction()
        ctx = _ctx(state, clients, settings)
        action.validate(ctx)

        message = action.execute(ctx)()

        assert isinstance(message, ActionCompleted)
        browser.assert_called_once_with("https://acme.atlassian.net/browse/KEY-1")

    def test_browser_refusal_is_retryable_failure(self, state, clients, settings, browser):
        browser.return_value = False
        action = OpenURLAction()
        ctx = _ctx(state, clients, settings)
        action.validate(ctx)

        message = action.execute(ctx)()

        assert isinstance(message, ActionFailed)
        assert message.retryable

    def test_requires_server(self, state, clients, settings):
        with pytest.raises(ValidationError):
            OpenURLAction().validate(_ctx(state, clients, replace(settings, jira_server="")))

    def test_immediate_strategy(self):
        assert OpenURLAction().get_refresh_strategy() == RefreshStrategy.IMMEDIATE


class TestUnexpectedErrors:
    """Errors outside the API error family still come back as ActionFailed."""

    def _run(self, action, state, clients, settings):
        ctx = _ctx(state, clients, settings)
        action.validate(ctx)
        return action.execute(ctx)()

    def _assert_failed(self, message, action):
        assert isinstance(message, ActionFailed)
        assert isinstance(message.error, RemoteError)
        assert not message.retryable
        assert message.action is action

    def test_change_status(self, state, clients, settings, jira):
        jira.transition_issue.side_effect = RuntimeError("boom")
        action = ChangeStatusAction("Done", "41")
        message = self._run(action, state, clients, settings)
        self._assert_failed(message, action)
        assert "boom" in str(message.error)

    def test_log_time(self, state, clients, settings, tempo):
        tempo.create_worklog.side_effect = KeyError("issueId")
        action = LogTimeAction("1h", today=TODAY)
        self._assert_failed(self._run(action, state, clients, settings), action)

    def test_copy(self, state, clients, settings, clipboard):
        clipboard.side_effect = RuntimeError("display gone")
        action = CopyAction()
        self._assert_failed(self._run(action, state, clients, settings), action)

    def test_open_url(self, state, clients, settings, browser):
        browser.side_effect = OSError("no browser")
        action = OpenURLAction()
        self._assert_failed(self._run(action, state, clients, settings), action)
