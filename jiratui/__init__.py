"""Terminal front-end for the Jira daily report.

Actions (status changes, time logging, copy, open) are applied
optimistically and verified against Jira/Tempo afterwards.
"""

from .app import DailyReportApp

__all__ = ["DailyReportApp"]
