from __future__ import annotations

import copy
from datetime import datetime, timezone

from taskgrid import AdvancedFilters, FilterState, SortState, process

NOW = datetime(2024, 6, 12, 9, 30, tzinfo=timezone.utc)


def test_rows_are_augmented_copies(tasks) -> None:
    original = copy.deepcopy(tasks)
    rows = process(tasks, all_records=tasks, now=NOW)

    assert tasks == original
    assert all(row is not rec for row in rows for rec in tasks)
    by_id = {row["id"]: row for row in rows}
    assert by_id["t1"]["progressPercent"] == 50
    assert (by_id["t1"]["completedCount"], by_id["t1"]["totalCount"]) == (1, 2)
    assert by_id["t2"]["progressPercent"] == 100
    assert by_id["t3"]["progressPercent"] == 0
    assert by_id["t1"]["subtasks"] == '["t2", "t3"]'


def test_default_task_order_is_due_date(tasks) -> None:
    rows = process(tasks, all_records=tasks, now=NOW)
    assert [row["id"] for row in rows] == ["t3", "t4", "t1", "t2"]


def test_process_is_idempotent(tasks, alice) -> None:
    state = FilterState(
        search="a",
        advanced=AdvancedFilters(tags=["finance", "release"]),
        columns={"status": "in progress, done, completed"},
    )
    sort = SortState(field="priority", direction="desc")
    kwargs = dict(all_records=tasks, current_user=alice, now=NOW)

    first = process(tasks, state, sort, **kwargs)
    assert process(tasks, state, sort, **kwargs) == first
    assert process(first, state, sort, **kwargs) == first


def test_unresolved_reference_stays_bare() -> None:
    rows = process(
        [{"id": "p", "subtasks": '["t1", "t2"]'}],
        all_records=[{"id": "t1", "status": "Done"}],
        now=NOW,
    )
    assert rows[0]["progressPercent"] == 50
    assert (rows[0]["completedCount"], rows[0]["totalCount"]) == (1, 2)


def test_projects_resolve_tasks_from_auxiliary_set(projects, tasks) -> None:
    rows = process(projects, kind="project", all_records=tasks, now=NOW)
    assert [row["id"] for row in rows] == ["p1", "p2"]
    assert rows[0]["progressPercent"] == 50
    assert rows[1]["progressPercent"] == 0


def test_non_mapping_records_are_skipped() -> None:
    rows = process([{"id": "ok"}, "junk", None], now=NOW)  # type: ignore[list-item]
    assert [row["id"] for row in rows] == ["ok"]
