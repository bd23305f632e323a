"""Pydantic schemas for Jira and Tempo payloads.

These schemas act as contracts at ingress points so we fail fast when
external payloads change shape. Field names are snake_case in Python and
camelCase on the wire.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class User(_Wire):
    account_id: str = Field(alias="accountId")
    display_name: str = Field(default="", alias="displayName")
    email_address: str = Field(default="", alias="emailAddress")


class Status(_Wire):
    name: str = ""


class IssueType(_Wire):
    name: str = ""


class Priority(_Wire):
    name: str = ""


class IssueFields(_Wire):
    summary: str = ""
    status: Status = Field(default_factory=Status)
    issue_type: IssueType = Field(default_factory=IssueType, alias="issuetype")
    priority: Optional[Priority] = None
    description: Optional[Any] = None
    updated: str = ""


class Issue(_Wire):
    id: str = ""
    key: str
    fields: IssueFields = Field(default_factory=IssueFields)

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v):
        return "" if v is None else str(v)

    @property
    def status_name(self) -> str:
        return self.fields.status.name


class TransitionTarget(_Wire):
    name: str = ""


class Transition(_Wire):
    id: str
    name: str = ""
    to: TransitionTarget = Field(default_factory=TransitionTarget)


class WorklogIssue(_Wire):
    # Tempo returns the issue id as a number
    id: int = 0
    key: str = ""
    summary: str = ""


class Author(_Wire):
    account_id: str = Field(default="", alias="accountId")


class Worklog(_Wire):
    # None marks a provisional entry that has not been confirmed by Tempo yet
    tempo_worklog_id: Optional[int] = Field(default=None, alias="tempoWorklogId")
    issue: WorklogIssue = Field(default_factory=WorklogIssue)
    time_spent_seconds: int = Field(default=0, ge=0, alias="timeSpentSeconds")
    start_date: str = Field(default="", alias="startDate")
    description: str = ""
    author: Author = Field(default_factory=Author)

    @property
    def is_provisional(self) -> bool:
        return self.tempo_worklog_id is None


class WorklogRequest(_Wire):
    issue_id: int = Field(alias="issueId")
    time_spent_seconds: int = Field(gt=0, alias="timeSpentSeconds")
    start_date: str = Field(alias="startDate")  # YYYY-MM-DD
    description: str = ""
    author_account_id: str = Field(alias="authorAccountId")

    @field_validator("author_account_id")
    @classmethod
    def account_nonempty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("authorAccountId cannot be empty")
        return v


class WorklogResponse(_Wire):
    tempo_worklog_id: int = Field(alias="tempoWorklogId")
    jira_worklog_id: Optional[int] = Field(default=None, alias="jiraWorklogId")
    issue: WorklogIssue = Field(default_factory=WorklogIssue)
    time_spent_seconds: int = Field(default=0, alias="timeSpentSeconds")
    start_date: str = Field(default="", alias="startDate")
    description: str = ""


class DateGroup(BaseModel):
    date: str
    display_date: str
    worklogs: List[Worklog] = Field(default_factory=list)
    total_seconds: int = 0
