"""State copy, snapshot/rollback and task-moving helpers for actions."""

from __future__ import annotations

import dataclasses
from typing import Callable, List, Optional

from jirareport.models import Issue, Worklog
from jirareport.worklogs import group_worklogs_by_date

from ..state import TASK_PANELS, AppState, PanelType


def _copy_models(items) -> list:
    return [item.model_copy(deep=True) for item in items]


def clone_state(state: Optional[AppState]) -> Optional[AppState]:
    """Deep copy of every mutable collection in the state.

    The user is shared by reference (never mutated). The snapshot slot is
    carried over as-is so an optimistic copy keeps its rollback point.
    """
    if state is None:
        return None
    return dataclasses.replace(
        state,
        report_tasks=_copy_models(state.report_tasks),
        todo_tasks=_copy_models(state.todo_tasks),
        processing_tasks=_copy_models(state.processing_tasks),
        worklogs=_copy_models(state.worklogs),
        date_groups=_copy_models(state.date_groups),
        selected_indices=dict(state.selected_indices),
        current_action=dataclasses.replace(state.current_action) if state.current_action else None,
    )


def save_state_snapshot(state: AppState) -> AppState:
    """Snapshot for rollback. Snapshots never nest."""
    snapshot = clone_state(state)
    snapshot.snapshot = None
    return snapshot


def restore_from_snapshot(state: AppState, snapshot: Optional[AppState]) -> None:
    """Overwrite the live collections with fresh copies of the snapshot's.

    Safe to call repeatedly with the same snapshot.
    """
    if snapshot is None:
        return
    state.report_tasks = _copy_models(snapshot.report_tasks)
    state.todo_tasks = _copy_models(snapshot.todo_tasks)
    state.processing_tasks = _copy_models(snapshot.processing_tasks)
    state.worklogs = _copy_models(snapshot.worklogs)
    state.date_groups = _copy_models(snapshot.date_groups)
    state.status_message = snapshot.status_message
    state.selected_indices = dict(snapshot.selected_indices)


def settle_success(state: AppState, message: str) -> AppState:
    state.snapshot = None
    state.status_message = message
    state.current_action = None
    return state


def settle_error(state: AppState, message: str) -> AppState:
    """Roll back to the pending snapshot, if any, and show the error."""
    if state.snapshot is not None:
        restore_from_snapshot(state, state.snapshot)
        state.snapshot = None
    state.status_message = message
    state.current_action = None
    return state


def _panel_list(state: AppState, panel: PanelType) -> Optional[List[Issue]]:
    if panel in TASK_PANELS:
        return state.tasks_for(panel)
    return None


def find_task(state: AppState, task_key: str) -> Optional[Issue]:
    """Search every task panel for a key."""
    for panel in TASK_PANELS:
        for task in state.tasks_for(panel):
            if task.key == task_key:
                return task
    return None


def find_task_panel(state: AppState, task_key: str) -> Optional[PanelType]:
    for panel in TASK_PANELS:
        if any(task.key == task_key for task in state.tasks_for(panel)):
            return panel
    return None


def update_task(state: AppState, task_key: str, update_fn: Callable[[Issue], None]) -> bool:
    task = find_task(state, task_key)
    if task is None:
        return False
    update_fn(task)
    return True


def remove_task(state: AppState, task_key: str, from_panel: PanelType) -> bool:
    tasks = _panel_list(state, from_panel)
    if tasks is None:
        return False
    for i, task in enumerate(tasks):
        if task.key == task_key:
            del tasks[i]
            state.clamp_selection(from_panel)
            return True
    return False


def add_task(state: AppState, task: Issue, to_panel: PanelType) -> None:
    tasks = _panel_list(state, to_panel)
    if tasks is not None:
        tasks.append(task)


def move_task_between_panels(state: AppState, task_key: str, from_panel: PanelType, to_panel: PanelType) -> bool:
    """Move a task; a same-panel move is a successful no-op."""
    if from_panel == to_panel:
        return find_task(state, task_key) is not None
    task = next((t for t in state.tasks_for(from_panel) if t.key == task_key), None)
    if task is None:
        return False
    moved = task.model_copy(deep=True)
    remove_task(state, task_key, from_panel)
    add_task(state, moved, to_panel)
    return True


def add_worklog(state: AppState, worklog: Worklog) -> None:
    """Prepend a worklog and rebuild the date groups."""
    state.worklogs = [worklog] + list(state.worklogs)
    state.date_groups = group_worklogs_by_date(state.worklogs)


def confirm_provisional_worklog(
    state: AppState, issue_key: str, seconds: int, start_date: str, tempo_worklog_id: Optional[int]
) -> bool:
    """Swap the matching provisional worklog for the one Tempo created."""
    for i, log in enumerate(state.worklogs):
        if (
            log.is_provisional
            and log.issue.key == issue_key
            and log.time_spent_seconds == seconds
            and log.start_date == start_date
        ):
            state.worklogs[i] = log.model_copy(update={"tempo_worklog_id": tempo_worklog_id})
            state.date_groups = group_worklogs_by_date(state.worklogs)
            return True
    return False
