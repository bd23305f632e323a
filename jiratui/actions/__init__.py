"""User actions with optimistic updates and rollback."""

from .base import Action
from .change_status import ChangeStatusAction, panel_for_status
from .context import ActionContext, build_action_context
from .copy import CopyAction, CopyFormat
from .errors import ActionError, RemoteError, ValidationError, VerificationError, VerificationTimeout
from .executor import ActionExecutor
from .log_time import LogTimeAction, parse_date, parse_time_string
from .open_url import OpenURLAction

__all__ = [
    "Action",
    "ActionContext",
    "ActionError",
    "ActionExecutor",
    "ChangeStatusAction",
    "CopyAction",
    "CopyFormat",
    "LogTimeAction",
    "OpenURLAction",
    "RemoteError",
    "ValidationError",
    "VerificationError",
    "VerificationTimeout",
    "build_action_context",
    "panel_for_status",
    "parse_date",
    "parse_time_string",
]
