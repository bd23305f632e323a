"""Runs actions and keeps a bounded history of their outcomes."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from ..messages import ActionFailed, ActionStarted, Command
from ..state import ActionResult, ActionState
from ..utils.logging import log
from .base import Action
from .context import ActionContext
from .errors import ValidationError

DEFAULT_HISTORY_SIZE = 50


class ActionExecutor:
    """Validates actions and records how they ended.

    History is a ring buffer: once full, the oldest slot is overwritten.
    """

    def __init__(self, max_history: int = DEFAULT_HISTORY_SIZE):
        self.max_history = max_history
        self._history: List[Optional[ActionResult]] = [None] * max_history
        self._index = 0
        self._current: Optional[ActionState] = None

    def execute_action(self, action: Action, ctx: ActionContext) -> Command:
        """Return a command that validates `action`.

        The command yields ActionStarted when validation passes and a
        non-retryable ActionFailed otherwise. It never touches the network.
        """

        def command():
            try:
                action.validate(ctx)
            except ValidationError as exc:
                log(f"{action.name()}: validation failed: {exc}")
                return ActionFailed(
                    action_name=action.name(),
                    error=ValidationError(f"validation failed: {exc}"),
                    retryable=False,
                    action=action,
                )
            return ActionStarted(action_name=action.name(), action=action, start_time=datetime.now())

        return command

    def record_result(self, result: ActionResult) -> None:
        self._history[self._index] = result
        self._index = (self._index + 1) % self.max_history

    def get_history(self) -> List[ActionResult]:
        """Most recent first. Stops at the first empty slot."""
        results = []
        for offset in range(1, self.max_history + 1):
            slot = self._history[(self._index - offset) % self.max_history]
            if slot is None:
                break
            results.append(slot)
        return results

    def clear_history(self) -> None:
        self._history = [None] * self.max_history
        self._index = 0

    def get_current_action(self) -> Optional[ActionState]:
        return self._current

    def set_current_action(self, state: Optional[ActionState]) -> None:
        self._current = state
