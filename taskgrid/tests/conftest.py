"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from taskgrid.models import CurrentUser

# A Wednesday; its week runs 2024-06-10 .. 2024-06-16.
NOW = datetime(2024, 6, 12, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def tasks_file(tmp_path: Path, tasks: list[dict[str, Any]]) -> Path:
    """The task fixture exported as an API envelope."""
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps({"items": tasks}), encoding="utf-8")
    return path


@pytest.fixture
def projects_file(tmp_path: Path, projects: list[dict[str, Any]]) -> Path:
    path = tmp_path / "projects.json"
    path.write_text(json.dumps(projects), encoding="utf-8")
    return path


@pytest.fixture
def tasks() -> list[dict[str, Any]]:
    """Four tasks covering the legacy field encodings."""
    return [
        {
            "id": "t1",
            "title": "Write report",
            "description": "Quarterly numbers",
            "project": "Apollo",
            "status": "In Progress",
            "priority": "High",
            "assignee": "alice",
            "startDate": "2024-06-01",
            "dueDate": "2024-06-10",
            "tags": "urgent, finance",
            "subtasks": '["t2", "t3"]',
            "estimatedHours": 5,
        },
        {
            "id": "t2",
            "title": "Collect data",
            "project": "Apollo",
            "status": "Done",
            "priority": "Medium",
            "assignee": ["bob", "alice@example.com"],
            "startDate": "2024-06-11",
            "dueDate": "2024-06-20T17:00:00Z",
            "tags": ["finance"],
            "subtasks": [],
        },
        {
            "id": "t3",
            "title": "Review draft",
            "project": "Zephyr",
            "status": "To Do",
            "priority": "Low",
            "assignee": "",
            "assignedTeams": "",
            "tags": "",
            "estimatedHours": "3",
        },
        {
            "id": "t4",
            "title": "ship release",
            "project": "Zephyr",
            "status": "Completed",
            "priority": "Urgent",
            "assignee": "carol",
            "dueDate": "2024-05-01",
            "tags": '["release"]',
            "subtasks": '{"items": [{"id": "x", "completed": true}, {"id": "y"}]}',
            "comments": 2,
            "attachments": ["brief.pdf"],
        },
    ]


@pytest.fixture
def projects() -> list[dict[str, Any]]:
    return [
        {
            "id": "p1",
            "name": "Apollo",
            "company": "Acme",
            "status": "Active",
            "priority": "High",
            "assignee": "alice",
            "team": ["alice", "bob"],
            "startDate": "2024-05-01",
            "endDate": "2024-06-30",
            "tasks": ["t1", "t2"],
            "tags": "a,b",
        },
        {
            "id": "p2",
            "name": "zephyr",
            "company": "Globex",
            "status": "on_hold",
            "priority": "Low",
            "team": "",
            "startDate": "2024-01-01",
            "endDate": "2024-03-31",
            "tasks": "[]",
            "tags": ["b"],
        },
    ]


@pytest.fixture
def alice() -> CurrentUser:
    return CurrentUser(id="u-alice", name="alice", email="alice@example.com")
