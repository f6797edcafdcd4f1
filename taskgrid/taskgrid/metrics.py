"""Derived metrics: completion counts, progress percentage, overdue state."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from .config import DEFAULT_CONFIG, EngineConfig
from .models import DerivedMetrics, PreparedRecord, Record
from .normalize import normalize_list, parse_day, resolve_references, tag_set, to_number
from .profiles import RecordProfile

_COMPLETION_FLAGS = ("completed", "done", "isCompleted")
_STATUS_KEYS = ("status", "state", "label")


def is_completed_item(item: Any, config: EngineConfig = DEFAULT_CONFIG) -> bool:
    """Bare identifiers and plain strings never count as completed."""
    if not isinstance(item, Mapping):
        return False
    for flag in _COMPLETION_FLAGS:
        if item.get(flag) is True:
            return True
    return any(config.is_completion(item.get(key)) for key in _STATUS_KEYS)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_percent(value: float) -> int:
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return 100 if value > 0 else 0
    return max(0, min(100, _round_half_up(value)))


def derive_progress(
    record: Record,
    items: Sequence[Any],
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> DerivedMetrics:
    total = len(items)
    if total == 0:
        if config.is_completion(record.get("status")):
            return DerivedMetrics(completed=1, total=1, progress_percent=100)
        own = to_number(record.get("progress"), default=0)
        return DerivedMetrics(completed=0, total=1, progress_percent=_clamp_percent(own) if own > 0 else 0)

    completed = sum(1 for item in items if is_completed_item(item, config))
    return DerivedMetrics(
        completed=completed,
        total=total,
        progress_percent=_clamp_percent(completed / total * 100),
    )


def is_overdue(
    record: Record,
    profile: RecordProfile,
    now: datetime | None = None,
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> bool:
    """Due/end date before today and not completed. No date, never overdue."""
    due = parse_day(record.get(profile.end_field))
    if due is None:
        return False
    today = (now or datetime.now(timezone.utc)).date()
    return due < today and not config.is_completion(record.get("status"))


def prepare_record(
    record: Record,
    profile: RecordProfile,
    *,
    all_records: Sequence[Record] | Mapping[str, Record] | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> PreparedRecord:
    items = resolve_references(normalize_list(record.get(profile.list_field)), all_records)
    return PreparedRecord(
        record=record,
        tags=tag_set(record.get("tags")),
        items=items,
        metrics=derive_progress(record, items, config=config),
    )
