"""Client factories for the TUI layer."""

from __future__ import annotations

import webbrowser
from dataclasses import dataclass
from typing import Callable, Optional

from jirareport.jira_client import JiraClient
from jirareport.tempo_client import TempoClient

from .clipboard import copy_to_clipboard


@dataclass(frozen=True)
class Clients:
    """Collaborator handles passed to actions and verifiers."""

    jira: Optional[JiraClient] = None
    tempo: Optional[TempoClient] = None
    clipboard: Callable[[str], None] = copy_to_clipboard
    open_browser: Callable[[str], bool] = webbrowser.open


def get_jira_client(settings) -> JiraClient:
    """Return a Jira API client."""

    return JiraClient.from_settings(settings)


def get_tempo_client(settings) -> TempoClient:
    """Return a Tempo API client."""

    return TempoClient.from_settings(settings)


def build_clients(settings) -> Clients:
    return Clients(jira=get_jira_client(settings), tempo=get_tempo_client(settings))
