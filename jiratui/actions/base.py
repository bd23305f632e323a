"""The Action contract.

Every user action follows the same lifecycle:
validate -> (snapshot + optimistic_update, execute) -> on_success | on_error,
optionally followed by verification polling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..messages import Command
from ..state import AppState, RefreshStrategy
from .context import ActionContext


class Action(ABC):
    """A user-triggered unit of work."""

    @abstractmethod
    def name(self) -> str:
        """Human-readable label for logs and the status bar."""

    @abstractmethod
    def validate(self, ctx: ActionContext) -> None:
        """Raise ValidationError if the action cannot run.

        Resolves and caches the parameters execute() needs. Must not touch
        the network or any shared state.
        """

    @abstractmethod
    def execute(self, ctx: ActionContext) -> Command:
        """Return a command performing the single remote call.

        The command returns ActionCompleted or ActionFailed and never raises.
        """

    @abstractmethod
    def optimistic_update(self, state: AppState) -> AppState:
        """Return the state as it should look once the action succeeds.

        The input state is left untouched.
        """

    @abstractmethod
    def on_success(self, state: AppState, result: Any) -> AppState:
        """Reconcile the optimistic state with the remote result."""

    @abstractmethod
    def on_error(self, state: AppState, error: Exception) -> AppState:
        """Roll back the optimistic update and surface the error."""

    @abstractmethod
    def get_refresh_strategy(self) -> RefreshStrategy:
        """How the UI learns that the remote change is visible."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name()!r}>"
