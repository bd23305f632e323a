"""Copy task information to the clipboard."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ..messages import ActionCompleted, ActionFailed, Command
from ..services.clipboard import ClipboardError
from ..state import AppState, RefreshStrategy
from ..utils.logging import log
from .base import Action
from .context import ActionContext
from .errors import RemoteError, ValidationError
from .helpers import settle_error, settle_success


class CopyFormat(Enum):
    KEY = "key"  # PROJ-123
    URL = "url"  # https://site/browse/PROJ-123
    FORMATTED = "formatted"  # [PROJ-123] Title
    MARKDOWN = "markdown"  # [PROJ-123](url) - Title


_NAMES = {
    CopyFormat.KEY: "Copy Key",
    CopyFormat.URL: "Copy URL",
    CopyFormat.FORMATTED: "Copy Formatted",
    CopyFormat.MARKDOWN: "Copy Markdown",
}

_DONE = {
    CopyFormat.KEY: "Copied {key} to clipboard",
    CopyFormat.URL: "Copied URL for {key} to clipboard",
    CopyFormat.FORMATTED: "Copied formatted text for {key} to clipboard",
    CopyFormat.MARKDOWN: "Copied markdown link for {key} to clipboard",
}


class CopyAction(Action):
    def __init__(self, copy_format: CopyFormat = CopyFormat.KEY):
        self.format = copy_format
        self.task_key = ""
        self.content = ""

    def name(self) -> str:
        return _NAMES.get(self.format, "Copy")

    def validate(self, ctx: ActionContext) -> None:
        if not ctx.has_selected_task():
            raise ValidationError("no task selected")

        key = ctx.task_key
        summary = ctx.selected_task.fields.summary
        url = ctx.browse_url(key)
        if self.format == CopyFormat.URL:
            content = url
        elif self.format == CopyFormat.FORMATTED:
            content = f"[{key}] {summary}"
        elif self.format == CopyFormat.MARKDOWN:
            content = f"[{key}]({url}) - {summary}"
        else:
            content = key

        self.task_key = key
        self.content = content

    def success_message(self) -> str:
        return _DONE.get(self.format, "Copied {key} to clipboard").format(key=self.task_key)

    def execute(self, ctx: ActionContext) -> Command:
        clipboard = ctx.clients.clipboard
        content = self.content

        def command():
            try:
                clipboard(content)
            except ClipboardError as exc:
                return ActionFailed(
                    action_name=self.name(),
                    error=RemoteError(f"failed to copy to clipboard: {exc}", retryable=False),
                    retryable=False,
                    action=self,
                )
            except Exception as exc:
                log(f"Unexpected clipboard error: {exc}", logging.ERROR)
                return ActionFailed(
                    action_name=self.name(),
                    error=RemoteError(f"failed to copy to clipboard: {exc}", retryable=False),
                    retryable=False,
                    action=self,
                )
            return ActionCompleted(
                action_name=self.name(),
                action=self,
                result={"message": self.success_message(), "content": content},
            )

        return command

    def optimistic_update(self, state: AppState) -> AppState:
        # The clipboard is external; nothing in the state changes
        return state

    def on_success(self, state: AppState, result: Any) -> AppState:
        message = self.success_message()
        if isinstance(result, dict):
            message = result.get("message", message)
        return settle_success(state, message)

    def on_error(self, state: AppState, error: Exception) -> AppState:
        return settle_error(state, f"Failed to copy: {error}")

    def get_refresh_strategy(self) -> RefreshStrategy:
        return RefreshStrategy.IMMEDIATE
