"""Type-aware record ordering.

Text fields compare case-insensitively, dates by epoch milliseconds (missing
dates are 0), status and priority through rank tables so that domain order
applies instead of alphabetical order, and numeric fields numerically.
"""

from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Any, Callable, Iterable, Mapping

from .config import DEFAULT_CONFIG, EngineConfig
from .models import Direction, SortState
from .normalize import epoch_ms, to_number
from .profiles import RecordProfile, get_profile

logger = logging.getLogger(__name__)

Comparator = Callable[[Mapping[str, Any], Mapping[str, Any]], int]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value if v is not None).casefold()
    return str(value).casefold()


def sort_value(rec: Mapping[str, Any], field: str, profile: RecordProfile, config: EngineConfig) -> Any:
    ftype = profile.field_type(field) or "text"
    value = rec.get(field)

    if ftype == "date":
        return epoch_ms(value)
    if ftype == "rank":
        if field == "status":
            return profile.status_rank(value)
        return config.priority_rank(value)
    if ftype == "number":
        # Derived percentage wins over the stored (often stale) progress.
        if field == "progress" and "progressPercent" in rec:
            value = rec.get("progressPercent")
        return to_number(value)
    return _text(value)


def resolve_sort(
    sort_state: SortState | None,
    profile: RecordProfile,
    config: EngineConfig = DEFAULT_CONFIG,
) -> tuple[str, Direction]:
    """
    Effective (field, direction) for one call.

    An active per-column sort overrides the global sort state. Fields the
    profile cannot sort fall back to the configured default.
    """
    state = sort_state or SortState()
    field, direction = state.field, state.direction
    for column, column_direction in (state.column_sorts or {}).items():
        if column_direction in ("asc", "desc"):
            field, direction = column, column_direction
            break

    if direction not in ("asc", "desc"):
        direction = "asc"

    if profile.field_type(field) is None:
        fallback = config.default_sort_field(profile.kind)
        if profile.field_type(fallback) is None:
            fallback = profile.title_field
        if field:
            logger.debug("sort field %r not sortable for %s records; using %r", field, profile.kind, fallback)
        field = fallback
    return field, direction


def _comparator(field: str, direction: str, profile: RecordProfile, config: EngineConfig) -> Comparator:
    sign = -1 if direction == "desc" else 1

    def cmp(a: Mapping[str, Any], b: Mapping[str, Any]) -> int:
        va = sort_value(a, field, profile, config)
        vb = sort_value(b, field, profile, config)
        if va < vb:
            return -sign
        if va > vb:
            return sign
        return 0

    return cmp


def compare(
    a: Mapping[str, Any],
    b: Mapping[str, Any],
    field: str,
    direction: str = "asc",
    *,
    kind: str | RecordProfile = "task",
    config: EngineConfig | None = None,
) -> int:
    """Three-way comparison (-1, 0, 1) of two records on `field`."""
    profile = get_profile(kind)
    config = config or DEFAULT_CONFIG
    field, resolved_direction = resolve_sort(SortState(field=field, direction=direction), profile, config)  # type: ignore[arg-type]
    return _comparator(field, resolved_direction, profile, config)(a, b)


def sort_records(
    records: Iterable[Mapping[str, Any]],
    sort_state: SortState | None = None,
    *,
    kind: str | RecordProfile = "task",
    config: EngineConfig | None = None,
) -> list[Mapping[str, Any]]:
    """Stable sort; equal records keep their input order."""
    profile = get_profile(kind)
    config = config or DEFAULT_CONFIG
    field, direction = resolve_sort(sort_state, profile, config)
    return sorted(records, key=cmp_to_key(_comparator(field, direction, profile, config)))
