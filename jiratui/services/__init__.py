"""Collaborators used by the TUI: API clients, clipboard, loaders."""

from .clients import Clients, build_clients, get_jira_client, get_tempo_client
from .clipboard import ClipboardError, copy_to_clipboard
from .loader import load_tasks_command, load_worklogs_command

__all__ = [
    "ClipboardError",
    "Clients",
    "build_clients",
    "copy_to_clipboard",
    "get_jira_client",
    "get_tempo_client",
    "load_tasks_command",
    "load_worklogs_command",
]
