from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from ..config import DEFAULT_CONFIG, EngineConfig
from ..metrics import prepare_record
from ..models import CurrentUser, PreparedRecord, Record
from ..profiles import RecordProfile, get_profile
from .predicates import LAYERS, FilterContext, RecordPredicate
from .schema import FilterState


def make_context(
    kind: str | RecordProfile = "task",
    *,
    current_user: CurrentUser | Mapping[str, Any] | None = None,
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> FilterContext:
    if current_user is not None and not isinstance(current_user, CurrentUser):
        current_user = CurrentUser.from_mapping(current_user)
    return FilterContext(
        profile=get_profile(kind),
        now=now or datetime.now(timezone.utc),
        current_user=current_user,
        config=config or DEFAULT_CONFIG,
    )


def build_predicates(state: FilterState | None, ctx: FilterContext) -> list[tuple[str, RecordPredicate]]:
    """
    Build the active layer predicates for a filter state.

    Built once per filter state and reused for every record. Inactive layers
    contribute nothing, so an empty filter state yields an empty list.
    """
    if state is None:
        return []
    predicates: list[tuple[str, RecordPredicate]] = []
    for name, builder in LAYERS.items():
        predicate = builder(state, ctx)
        if predicate is not None:
            predicates.append((name, predicate))
    return predicates


def evaluate(rec: PreparedRecord, predicates: Sequence[tuple[str, RecordPredicate]]) -> bool:
    # Short-circuits on the first failing layer.
    return all(predicate(rec) for _, predicate in predicates)


def filter_records(
    prepared: Iterable[PreparedRecord],
    state: FilterState | None,
    ctx: FilterContext,
) -> list[PreparedRecord]:
    predicates = build_predicates(state, ctx)
    if not predicates:
        return list(prepared)
    return [rec for rec in prepared if evaluate(rec, predicates)]


def matches(
    record: Record,
    filter_state: FilterState | None,
    current_user: CurrentUser | Mapping[str, Any] | None = None,
    all_records: Sequence[Record] | None = None,
    *,
    kind: str | RecordProfile = "task",
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> bool:
    """Does a single record satisfy every active layer of `filter_state`?"""
    ctx = make_context(kind, current_user=current_user, now=now, config=config)
    rec = prepare_record(record, ctx.profile, all_records=all_records, config=ctx.config)
    return evaluate(rec, build_predicates(filter_state, ctx))
