"""Data schemas and validation."""
from .schemas import (
    Author,
    DateGroup,
    Issue,
    IssueFields,
    IssueType,
    Priority,
    Status,
    Transition,
    User,
    Worklog,
    WorklogIssue,
    WorklogRequest,
    WorklogResponse,
)

__all__ = [
    "Author",
    "DateGroup",
    "Issue",
    "IssueFields",
    "IssueType",
    "Priority",
    "Status",
    "Transition",
    "User",
    "Worklog",
    "WorklogIssue",
    "WorklogRequest",
    "WorklogResponse",
]
