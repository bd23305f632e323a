"""Worklog grouping helpers shared by the loader and the LogTime action."""
from datetime import datetime
from typing import Dict, Iterable, List

from .models.schemas import DateGroup, Worklog


def display_date(iso_date: str) -> str:
    """'2024-01-15' -> 'Mon, Jan 15'. Unparsable input is returned as-is."""
    try:
        return datetime.strptime(iso_date, "%Y-%m-%d").strftime("%a, %b %d")
    except ValueError:
        return iso_date


def group_worklogs_by_date(worklogs: Iterable[Worklog]) -> List[DateGroup]:
    """Group worklogs per start date, newest date first.

    Worklogs keep their incoming order inside a group.
    """
    groups: Dict[str, DateGroup] = {}
    for log in worklogs:
        group = groups.get(log.start_date)
        if group is None:
            group = DateGroup(date=log.start_date, display_date=display_date(log.start_date))
            groups[log.start_date] = group
        group.worklogs.append(log)
        group.total_seconds += log.time_spent_seconds

    return sorted(groups.values(), key=lambda g: g.date, reverse=True)


def format_seconds(seconds: int) -> str:
    """7200 -> '2h', 9000 -> '2h 30m', 600 -> '10m'."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    if hours and minutes:
        return f"{hours}h {minutes}m"
    if hours:
        return f"{hours}h"
    return f"{minutes}m"
