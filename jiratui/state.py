"""Application state container.

AppState is owned by the app loop: only message handlers running on the
loop thread mutate it. Background work sees copies, never this object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from jirareport.models import DateGroup, Issue, User, Worklog


class PanelType(Enum):
    REPORT = 0  # [1] In Progress
    TODO = 1  # [2] Open tasks
    PROCESSING = 2  # [3] Under Review + Testing
    TIMELOG = 3  # [4] Time tracking
    DETAILS = 4  # [0] Details


TASK_PANELS = (PanelType.REPORT, PanelType.TODO, PanelType.PROCESSING)


class ActionStatus(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    EXECUTING = "executing"
    VERIFYING = "verifying"
    SUCCESS = "success"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"


class RefreshStrategy(Enum):
    IMMEDIATE = "immediate"  # no waiting, no verification (clipboard, browser)
    POLLING = "polling"  # poll until the change is visible or attempts run out
    DELAYED = "delayed"  # fixed delay, then a full reload
    MANUAL = "manual"  # user presses refresh


@dataclass
class ActionState:
    """The in-flight action, as shown in the status bar."""

    name: str
    status: ActionStatus = ActionStatus.IDLE
    start_time: datetime = field(default_factory=datetime.now)
    message: str = ""
    progress: float = 0.0
    task_key: str = ""


@dataclass(frozen=True)
class ActionResult:
    name: str
    success: bool
    start_time: datetime
    end_time: datetime
    error: Optional[str] = None

    @property
    def duration(self):
        return self.end_time - self.start_time


@dataclass
class AppState:
    """Holds everything the views render."""

    user: Optional[User] = None
    report_tasks: List[Issue] = field(default_factory=list)
    todo_tasks: List[Issue] = field(default_factory=list)
    processing_tasks: List[Issue] = field(default_factory=list)
    worklogs: List[Worklog] = field(default_factory=list)
    date_groups: List[DateGroup] = field(default_factory=list)
    active_panel: PanelType = PanelType.REPORT
    selected_indices: Dict[PanelType, int] = field(default_factory=dict)
    loading: bool = True
    worklogs_loading: bool = False
    status_message: str = ""
    error: Optional[str] = None

    current_action: Optional[ActionState] = None
    refresh_strategy: RefreshStrategy = RefreshStrategy.IMMEDIATE
    polling_active: bool = False
    last_refresh_time: Optional[datetime] = None
    # Pre-optimistic-update copy; at most one is live
    snapshot: Optional["AppState"] = None

    def tasks_for(self, panel: PanelType) -> List[Issue]:
        if panel == PanelType.REPORT:
            return self.report_tasks
        if panel == PanelType.TODO:
            return self.todo_tasks
        if panel == PanelType.PROCESSING:
            return self.processing_tasks
        return []

    def get_current_tasks(self) -> List[Issue]:
        return self.tasks_for(self.active_panel)

    def get_selected_index(self) -> int:
        return self.selected_indices.get(self.active_panel, 0)

    def set_selected_index(self, index: int) -> None:
        self.selected_indices[self.active_panel] = index

    def selected_task(self) -> Optional[Issue]:
        tasks = self.get_current_tasks()
        idx = self.get_selected_index()
        if 0 <= idx < len(tasks):
            return tasks[idx]
        return None

    def _selection_limit(self) -> int:
        if self.active_panel == PanelType.TIMELOG:
            return len(self.date_groups)
        return len(self.get_current_tasks())

    def move_selection_up(self) -> None:
        if self.get_selected_index() > 0:
            self.set_selected_index(self.get_selected_index() - 1)

    def move_selection_down(self) -> None:
        if self.get_selected_index() < self._selection_limit() - 1:
            self.set_selected_index(self.get_selected_index() + 1)

    def clamp_selection(self, panel: PanelType) -> None:
        """Keep a panel's index inside its (possibly shrunk) list."""
        size = len(self.tasks_for(panel))
        idx = self.selected_indices.get(panel, 0)
        if idx >= size:
            self.selected_indices[panel] = max(size - 1, 0)
