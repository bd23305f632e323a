"""Messages delivered to the app loop.

Every background unit (a "command") returns exactly one of these. The loop
handles them strictly in delivery order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional

from jirareport.models import DateGroup, Issue, User, Worklog

# A zero-argument unit of background work producing one message
Command = Callable[[], Any]


# Action lifecycle


@dataclass(frozen=True)
class ActionStarted:
    action_name: str
    action: Any
    start_time: datetime


@dataclass(frozen=True)
class ActionCompleted:
    action_name: str
    action: Any
    result: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ActionFailed:
    action_name: str
    error: Exception
    retryable: bool = False
    action: Any = None


# Verification polling


@dataclass(frozen=True)
class RefreshPolling:
    action_name: str
    attempt: int
    poller: Any
    verified: bool = False
    error: Optional[Exception] = None


@dataclass(frozen=True)
class RefreshVerified:
    action_name: str
    attempts: int


@dataclass(frozen=True)
class RefreshTimeout:
    action_name: str
    attempts: int


@dataclass(frozen=True)
class DelayedRefresh:
    action_name: str = ""


# Data loading


@dataclass(frozen=True)
class TasksLoaded:
    user: User
    report_tasks: List[Issue]
    todo_tasks: List[Issue]
    processing_tasks: List[Issue]


@dataclass(frozen=True)
class WorklogsLoaded:
    worklogs: List[Worklog]
    date_groups: List[DateGroup]


@dataclass(frozen=True)
class LoadFailed:
    what: str
    error: Exception


# Misc


@dataclass(frozen=True)
class StatusMessage:
    message: str
    is_error: bool = False


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class KeyInput:
    """A line typed into the shell."""

    line: str
