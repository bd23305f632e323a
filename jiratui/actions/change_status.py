"""Change the status of a Jira issue through a workflow transition."""

from __future__ import annotations

import logging
from typing import Any

from jirareport.errors import ApiError

from ..messages import ActionCompleted, ActionFailed, Command
from ..state import AppState, PanelType, RefreshStrategy
from ..utils.logging import log
from .base import Action
from .context import ActionContext
from .errors import RemoteError, ValidationError
from .helpers import clone_state, move_task_between_panels, settle_error, settle_success, update_task

# First matching rule wins; statuses are compared lower-cased by substring
_PANEL_RULES = (
    (("open", "to do", "selected for development"), PanelType.TODO),
    (("in progress", "development"), PanelType.REPORT),
    (("review", "testing", "qa", "ready for"), PanelType.PROCESSING),
)


def panel_for_status(status: str, default: PanelType) -> PanelType:
    """Which task panel an issue in `status` belongs to."""
    lowered = status.lower()
    for needles, panel in _PANEL_RULES:
        if any(needle in lowered for needle in needles):
            return panel
    return default


class ChangeStatusAction(Action):
    def __init__(self, target_status: str, transition_id: str):
        self.target_status = target_status
        self.transition_id = transition_id
        # Resolved by validate()
        self.task_key = ""
        self.current_status = ""
        self.source_panel = PanelType.REPORT
        self.target_panel = PanelType.REPORT

    def name(self) -> str:
        return "Change Status"

    def validate(self, ctx: ActionContext) -> None:
        if not ctx.has_selected_task():
            raise ValidationError("no task selected")
        if not self.transition_id:
            raise ValidationError("transition ID is required")
        if not self.target_status:
            raise ValidationError("target status is required")
        if ctx.clients.jira is None:
            raise ValidationError("Jira client not configured")

        self.task_key = ctx.task_key
        self.current_status = ctx.selected_task.status_name
        self.source_panel = ctx.active_panel
        self.target_panel = panel_for_status(self.target_status, self.source_panel)

    def execute(self, ctx: ActionContext) -> Command:
        jira = ctx.clients.jira
        task_key, transition_id, target_status = self.task_key, self.transition_id, self.target_status

        def command():
            try:
                jira.transition_issue(task_key, transition_id)
            except ApiError as exc:
                return ActionFailed(
                    action_name=self.name(),
                    error=RemoteError(f"failed to change status: {exc}", retryable=True),
                    retryable=True,
                    action=self,
                )
            except Exception as exc:
                log(f"Unexpected error changing status of {task_key}: {exc}", logging.ERROR)
                return ActionFailed(
                    action_name=self.name(),
                    error=RemoteError(f"failed to change status: {exc}", retryable=False),
                    retryable=False,
                    action=self,
                )
            return ActionCompleted(
                action_name=self.name(),
                action=self,
                result={
                    "task_key": task_key,
                    "target_status": target_status,
                    "message": f"Changed {task_key} to '{target_status}'",
                },
            )

        return command

    def optimistic_update(self, state: AppState) -> AppState:
        new_state = clone_state(state)

        def stage_status(task):
            task.fields.status.name = self.target_status

        update_task(new_state, self.task_key, stage_status)
        move_task_between_panels(new_state, self.task_key, self.source_panel, self.target_panel)
        new_state.status_message = f"Changing status to {self.target_status}..."
        return new_state

    def on_success(self, state: AppState, result: Any) -> AppState:
        message = f"Changed {self.task_key} to '{self.target_status}'"
        if isinstance(result, dict):
            message = result.get("message", message)
        return settle_success(state, message)

    def on_error(self, state: AppState, error: Exception) -> AppState:
        return settle_error(state, f"Failed to change status: {error}")

    def get_refresh_strategy(self) -> RefreshStrategy:
        return RefreshStrategy.POLLING
