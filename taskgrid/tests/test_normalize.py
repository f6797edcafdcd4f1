from __future__ import annotations

from datetime import datetime, timezone

import pytest

from taskgrid.normalize import (
    contains_identity,
    epoch_ms,
    identity_set,
    index_records,
    member_set,
    normalize_list,
    normalize_tags,
    parse_date,
    resolve_references,
    tag_set,
    to_number,
    unwrap_record,
    unwrap_typed_value,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, []),
        ("", []),
        ("   ", []),
        (["a", "b"], ["a", "b"]),
        (("a",), ["a"]),
        ('["a", "b"]', ["a", "b"]),
        ('{"items": ["x", "y"]}', ["x", "y"]),
        ('{"data": [1]}', [1]),
        ("a, b ,,c", ["a", "b", "c"]),
        ('"a,b"', ["a", "b"]),
        ("[oops", ["[oops"]),
        ({"items": ["z"]}, ["z"]),
        ({"L": [{"S": "a"}, {"N": "2"}]}, ["a", 2]),
        ({"S": "p,q"}, ["p", "q"]),
        (42, []),
    ],
)
def test_normalize_list_tiers(raw, expected) -> None:
    assert normalize_list(raw) == expected


def test_normalize_list_object_without_list_member_is_csv_text() -> None:
    assert normalize_list('{"other": 1}') == ['{"other": 1}']


def test_normalize_tags_labels_and_empties() -> None:
    raw = [{"name": "Design"}, {"label": "ops"}, " qa ", "", None, {}]
    assert normalize_tags(raw) == ["Design", "ops", "qa"]


def test_tag_set_is_case_folded() -> None:
    assert tag_set("Urgent, FINANCE") == frozenset({"urgent", "finance"})
    assert tag_set('["a", "A"]') == frozenset({"a"})
    assert tag_set(None) == frozenset()


def test_unwrap_record_typed_values() -> None:
    item = {
        "id": {"S": "t1"},
        "count": {"N": "3"},
        "ratio": {"N": "1.5"},
        "done": {"BOOL": True},
        "gone": {"NULL": True},
        "labels": {"SS": ["a", "b"]},
        "scores": {"NS": ["1", "x", "2.5"]},
        "meta": {"M": {"owner": {"S": "bob"}, "nested": {"L": [{"N": "7"}]}}},
        "plain": "kept",
        "_metadata": {"version": 3},
        "timestamp": 1718000000,
    }
    assert unwrap_record(item) == {
        "id": "t1",
        "count": 3,
        "ratio": 1.5,
        "done": True,
        "gone": None,
        "labels": ["a", "b"],
        "scores": [1, 2.5],
        "meta": {"owner": "bob", "nested": [7]},
        "plain": "kept",
    }


def test_unwrap_typed_value_leaves_ordinary_objects_alone() -> None:
    value = {"S": "x", "extra": 1}
    assert unwrap_typed_value(value) is value
    assert unwrap_typed_value({"name": "alice"}) == {"name": "alice"}


def test_resolve_references_replaces_known_ids_only() -> None:
    done = {"id": "t1", "status": "Done"}
    embedded = {"id": "z", "completed": True}
    resolved = resolve_references(["t1", "t2", embedded], [done])
    assert resolved == [done, "t2", embedded]
    assert isinstance(resolved[1], str)


def test_resolve_references_without_records_is_identity() -> None:
    assert resolve_references(["a", "b"], None) == ["a", "b"]
    assert resolve_references(["a"], []) == ["a"]


def test_index_records_accepts_dollar_id() -> None:
    index = index_records([{"$id": "abc", "n": 1}, {"id": 7}, "junk"])
    assert set(index) == {"abc", "7"}
    assert resolve_references([7], index) == [{"id": 7}]


@pytest.mark.parametrize(
    "value, identity, expected",
    [
        ("alice", "ALICE", True),
        ("alice, bob", "bob", True),
        ("Team Alice", "alice", True),
        (["Alice", "bob"], "alice", True),
        (["alice@example.com"], "alice", False),
        ('["u1", "u2"]', "u2", True),
        ({"id": "u1", "name": "Al"}, "u1", True),
        ([{"email": "c@x.io"}], ["nobody", "c@x.io"], True),
        (None, "x", False),
        ("alice", None, False),
        ("alice", ["", "  "], False),
        ("", "alice", False),
    ],
)
def test_contains_identity(value, identity, expected) -> None:
    assert contains_identity(value, identity) is expected


def test_identity_set_empty_owner_fields() -> None:
    assert identity_set("") == set()
    assert identity_set([]) == set()
    assert identity_set("[]") == set()
    assert identity_set('["Bob"]') == {"bob"}


def test_parse_date_formats() -> None:
    utc = timezone.utc
    assert parse_date("2024-06-12") == datetime(2024, 6, 12, tzinfo=utc)
    assert parse_date("2024-06-12T10:00:00Z") == datetime(2024, 6, 12, 10, tzinfo=utc)
    assert parse_date("2024-06-12T10:00:00+02:00") == datetime(2024, 6, 12, 8, tzinfo=utc)
    assert parse_date(0) == datetime(1970, 1, 1, tzinfo=utc)
    assert parse_date("not a date") is None
    assert parse_date("") is None
    assert parse_date(True) is None


def test_epoch_ms_missing_is_zero() -> None:
    assert epoch_ms(None) == 0
    assert epoch_ms("garbage") == 0
    assert epoch_ms("1970-01-02") == 86_400_000


def test_to_number() -> None:
    assert to_number("3") == 3.0
    assert to_number(" 2.5 ") == 2.5
    assert to_number("abc") == 0
    assert to_number(None, default=-1) == -1


def test_to_number_rejects_non_finite() -> None:
    assert to_number("nan") == 0
    assert to_number("inf") == 0
    assert to_number("-Infinity", default=-1) == -1
    assert to_number(float("nan"), default=-1) == -1
    assert to_number(float("inf"), default=-1) == -1
    assert unwrap_typed_value({"N": "nan"}) is None
    assert unwrap_typed_value({"NS": ["1", "inf", "2"]}) == [1, 2]


def test_normalize_list_deeply_nested_text() -> None:
    deep = "[" * 100_000 + "]" * 100_000
    assert normalize_list(deep) == [deep]
    assert tag_set(deep) == frozenset({deep.lower()})


def test_normalize_list_sets() -> None:
    assert normalize_list(frozenset({"b", "a"})) == ["a", "b"]
    assert normalize_list({3, 1, 2}) == [1, 2, 3]
    assert tag_set({"A", "b"}) == frozenset({"a", "b"})


def test_member_set_keeps_commas() -> None:
    assert member_set("Acme, Inc") == {"acme, inc"}
    assert member_set(["Acme, Inc", "Globex"]) == {"acme, inc", "globex"}
    assert member_set('["Acme", "Globex"]') == {"acme", "globex"}
    assert member_set({"S": "Apollo"}) == {"apollo"}
    assert member_set(None) == set()
    assert member_set("") == set()
