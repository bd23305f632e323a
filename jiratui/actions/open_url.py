"""Open the selected issue in the default browser."""

from __future__ import annotations

import logging
import webbrowser
from typing import Any

from ..messages import ActionCompleted, ActionFailed, Command
from ..state import AppState, RefreshStrategy
from ..utils.logging import log
from .base import Action
from .context import ActionContext
from .errors import RemoteError, ValidationError
from .helpers import settle_error, settle_success


class OpenURLAction(Action):
    def __init__(self):
        self.task_key = ""
        self.url = ""

    def name(self) -> str:
        return "Open URL"

    def validate(self, ctx: ActionContext) -> None:
        if not ctx.has_selected_task():
            raise ValidationError("no task selected")
        if not ctx.settings.jira_server:
            raise ValidationError("Jira server URL is not configured")
        self.task_key = ctx.task_key
        self.url = ctx.browse_url(self.task_key)

    def execute(self, ctx: ActionContext) -> Command:
        open_browser = ctx.clients.open_browser
        url, task_key = self.url, self.task_key

        def command():
            try:
                opened = open_browser(url)
            except webbrowser.Error as exc:
                opened, reason = False, str(exc)
            except Exception as exc:
                log(f"Unexpected error opening {url}: {exc}", logging.ERROR)
                return ActionFailed(
                    action_name=self.name(),
                    error=RemoteError(f"failed to open browser: {exc}", retryable=False),
                    retryable=False,
                    action=self,
                )
            else:
                reason = "no usable browser found"
            if not opened:
                return ActionFailed(
                    action_name=self.name(),
                    error=RemoteError(f"failed to open browser: {reason}", retryable=True),
                    retryable=True,
                    action=self,
                )
            return ActionCompleted(
                action_name=self.name(),
                action=self,
                result={"message": f"Opened {task_key} in browser", "url": url},
            )

        return command

    def optimistic_update(self, state: AppState) -> AppState:
        # Nothing to change locally; the browser is external
        return state

    def on_success(self, state: AppState, result: Any) -> AppState:
        message = f"Opened {self.task_key} in browser"
        if isinstance(result, dict):
            message = result.get("message", message)
        return settle_success(state, message)

    def on_error(self, state: AppState, error: Exception) -> AppState:
        return settle_error(state, f"Failed to open URL: {error}")

    def get_refresh_strategy(self) -> RefreshStrategy:
        return RefreshStrategy.IMMEDIATE
