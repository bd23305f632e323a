"""
Jira Daily Report - Jira + Tempo clients and shared configuration.

The terminal front-end lives in the sibling `jiratui` package.
"""

__version__ = "1.0.0"

from .jira_client import JiraClient
from .tempo_client import TempoClient

__all__ = [
    "JiraClient",
    "TempoClient",
]
