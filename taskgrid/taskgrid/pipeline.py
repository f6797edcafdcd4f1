"""The single entry point: normalize -> derive -> filter -> order."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Sequence

from .config import EngineConfig
from .filters.engine import filter_records, make_context
from .filters.schema import FilterState
from .metrics import prepare_record
from .models import CurrentUser, PreparedRecord, Record, SortState
from .normalize import index_records
from .ordering import sort_records
from .profiles import RecordProfile


def prepare_all(
    records: Sequence[Record],
    profile: RecordProfile,
    *,
    all_records: Sequence[Record] | None = None,
    config: EngineConfig,
) -> list[PreparedRecord]:
    index = index_records(all_records) if all_records else None
    return [
        prepare_record(rec, profile, all_records=index, config=config)
        for rec in records
        if isinstance(rec, Mapping)
    ]


def process(
    records: Sequence[Record],
    filter_state: FilterState | None = None,
    sort_state: SortState | None = None,
    *,
    kind: str | RecordProfile = "task",
    current_user: CurrentUser | Mapping[str, Any] | None = None,
    all_records: Sequence[Record] | None = None,
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> list[dict[str, Any]]:
    """
    Filter and order records for display.

    Returns new dicts: shallow copies of the visible records augmented with
    `progressPercent`, `completedCount` and `totalCount`. Source records are
    never mutated. Pure for a fixed `now`.

    Args:
        records: Task or project records as delivered by the store
        filter_state: The five filter layers (None means no filtering)
        sort_state: Global and per-column sort (None means default order)
        kind: "task" or "project", or a custom RecordProfile
        current_user: Identity for the `my-*` filters
        all_records: Auxiliary records used to resolve bare reference IDs
        now: Reference time for overdue and date presets (default: now, UTC)
        config: Engine configuration (default: DEFAULT_CONFIG)
    """
    ctx = make_context(kind, current_user=current_user, now=now, config=config)
    prepared = prepare_all(records, ctx.profile, all_records=all_records, config=ctx.config)
    visible = filter_records(prepared, filter_state, ctx)
    rows = [{**rec.record, **rec.metrics.as_display_fields()} for rec in visible]
    return sort_records(rows, sort_state, kind=ctx.profile, config=ctx.config)  # type: ignore[return-value]
