"""Per-kind field layouts for task and project records.

The engine is generic; a profile tells it which fields hold the title, dates,
owners and reference list for one record kind, which statuses are canonical and
how each sortable field compares.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

FieldType = Literal["text", "date", "rank", "number"]

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def enum_key(value: object) -> str:
    """Fold an enum-like value for comparison: `In Progress` == `in_progress`."""
    if value is None:
        return ""
    return _NON_ALNUM.sub("", str(value).lower())


@dataclass(frozen=True)
class RecordProfile:
    kind: str
    title_field: str
    search_fields: tuple[str, ...]
    list_field: str
    start_field: str
    end_field: str
    owner_fields: tuple[str, ...]
    project_field: str
    team_field: str
    statuses: tuple[str, ...]
    sort_fields: dict[str, FieldType] = field(default_factory=dict)
    estimate_field: str | None = None
    attachments_field: str = "attachments"
    comments_field: str = "comments"

    def status_rank(self, status: object) -> int:
        """1-based rank in canonical order; unknown statuses rank last."""
        key = enum_key(status)
        for i, member in enumerate(self.statuses, start=1):
            if enum_key(member) == key:
                return i
        return len(self.statuses) + 1

    def canonical_status(self, status: object) -> str | None:
        key = enum_key(status)
        for member in self.statuses:
            if enum_key(member) == key:
                return member
        return None

    def field_type(self, name: str) -> FieldType | None:
        return self.sort_fields.get(name)


_COMMON_SORT_FIELDS: dict[str, FieldType] = {
    "status": "rank",
    "priority": "rank",
    "assignee": "text",
    "description": "text",
    "startDate": "date",
    "createdAt": "date",
    "updatedAt": "date",
    "progress": "number",
    "progressPercent": "number",
    "completedCount": "number",
    "totalCount": "number",
}


TASK_PROFILE = RecordProfile(
    kind="task",
    title_field="title",
    search_fields=("title", "description", "project"),
    list_field="subtasks",
    start_field="startDate",
    end_field="dueDate",
    owner_fields=("assignee", "assignedUsers", "assignedTeams"),
    project_field="project",
    team_field="assignedTeams",
    statuses=("To Do", "In Progress", "Completed", "Overdue"),
    estimate_field="estimatedHours",
    sort_fields={
        **_COMMON_SORT_FIELDS,
        "title": "text",
        "project": "text",
        "dueDate": "date",
        "estimatedHours": "number",
        "timeSpent": "number",
        "comments": "number",
    },
)

PROJECT_PROFILE = RecordProfile(
    kind="project",
    title_field="name",
    search_fields=("name", "title", "description", "company"),
    list_field="tasks",
    start_field="startDate",
    end_field="endDate",
    owner_fields=("assignee", "team"),
    project_field="company",
    team_field="team",
    statuses=("Planning", "Active", "Completed", "On Hold"),
    sort_fields={
        **_COMMON_SORT_FIELDS,
        "name": "text",
        "title": "text",
        "company": "text",
        "department": "text",
        "endDate": "date",
        "budget": "number",
    },
)

PROFILES: dict[str, RecordProfile] = {
    "task": TASK_PROFILE,
    "tasks": TASK_PROFILE,
    "project": PROJECT_PROFILE,
    "projects": PROJECT_PROFILE,
}


def get_profile(kind: str | RecordProfile) -> RecordProfile:
    if isinstance(kind, RecordProfile):
        return kind
    profile = PROFILES.get(str(kind).strip().lower())
    if profile is None:
        raise ValueError(f"unknown record kind: {kind!r} (expected 'task' or 'project')")
    return profile
