from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskgrid.records import load_records, records_from_payload


def write_json(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_bare_list() -> None:
    assert records_from_payload([{"id": "a"}, "skip", {"id": "b"}]) == [{"id": "a"}, {"id": "b"}]


@pytest.mark.parametrize("key", ["items", "data", "documents"])
def test_envelopes(key: str) -> None:
    assert records_from_payload({key: [{"id": "a"}], "total": 1}) == [{"id": "a"}]


def test_typed_records_are_unwrapped(tmp_path: Path) -> None:
    path = write_json(
        tmp_path / "tasks.json",
        {
            "items": [
                {
                    "id": {"S": "t1"},
                    "title": {"S": "Write report"},
                    "estimatedHours": {"N": "4"},
                    "subtasks": {"L": [{"S": "t2"}]},
                    "_metadata": {"S": "internal"},
                }
            ]
        },
    )
    assert load_records(path) == [{"id": "t1", "title": "Write report", "estimatedHours": 4, "subtasks": ["t2"]}]


def test_no_record_list(tmp_path: Path) -> None:
    path = write_json(tmp_path / "stats.json", {"count": 3})
    with pytest.raises(ValueError, match="expected a list of records"):
        load_records(path)


def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(ValueError, match="invalid JSON"):
        load_records(path)
