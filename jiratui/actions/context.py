"""Per-invocation context handed to actions.

An ActionContext is rebuilt from the live state before every invocation.
It holds deep copies of the tasks, so a command running on a worker thread
never shares a mutable object with the loop.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from jirareport.config import Settings
from jirareport.models import Issue, User

from ..services.clients import Clients
from ..state import TASK_PANELS, AppState, PanelType


@dataclass(frozen=True)
class ActionContext:
    selected_task: Optional[Issue]
    active_panel: PanelType
    all_tasks: Mapping[PanelType, Tuple[Issue, ...]]
    user: Optional[User]
    clients: Clients
    settings: Settings
    extra_data: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def has_selected_task(self) -> bool:
        return self.selected_task is not None

    @property
    def task_key(self) -> str:
        return self.selected_task.key if self.selected_task else ""

    @property
    def task_id(self) -> str:
        return self.selected_task.id if self.selected_task else ""

    @property
    def user_account_id(self) -> str:
        """Account of the loaded user, falling back to the configured one."""
        if self.user is not None and self.user.account_id:
            return self.user.account_id
        return self.settings.account_id

    def browse_url(self, issue_key: str) -> str:
        return f"{self.settings.jira_server}/browse/{issue_key}"


def build_action_context(
    state: AppState,
    clients: Clients,
    settings: Settings,
    extra_data: Optional[Mapping[str, Any]] = None,
) -> ActionContext:
    """Capture what an action needs from the current state."""
    selected = state.selected_task()
    return ActionContext(
        selected_task=selected.model_copy(deep=True) if selected else None,
        active_panel=state.active_panel,
        all_tasks=MappingProxyType({
            panel: tuple(task.model_copy(deep=True) for task in state.tasks_for(panel))
            for panel in TASK_PANELS
        }),
        # Users are never mutated, so the reference is shared
        user=state.user,
        clients=clients,
        settings=settings,
        extra_data=MappingProxyType(dict(extra_data or {})),
    )
