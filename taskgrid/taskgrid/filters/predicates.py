from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Mapping

from ..config import DEFAULT_CONFIG, EngineConfig
from ..metrics import is_overdue
from ..models import CurrentUser, PreparedRecord
from ..normalize import contains_identity, identity_set, member_set, normalize_list, normalize_tags, parse_day, to_number
from ..profiles import RecordProfile, enum_key
from .presets import resolve_date_preset
from .schema import AdvancedFilters, DateRange, FilterState, NumberRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterContext:
    profile: RecordProfile
    now: datetime
    current_user: CurrentUser | None = None
    config: EngineConfig = DEFAULT_CONFIG


RecordPredicate = Callable[[PreparedRecord], bool]
LayerBuilder = Callable[[FilterState, FilterContext], "RecordPredicate | None"]

_UNASSIGNED = {"unassigned", "noassignee", "none"}
_ENUM_COLUMNS = {"status", "priority"}


def _all(checks: list[RecordPredicate]) -> RecordPredicate | None:
    if not checks:
        return None
    if len(checks) == 1:
        return checks[0]
    return lambda rec: all(check(rec) for check in checks)


def _values(raw: Any) -> list[str]:
    """Accepted values of a list dimension, empties and `all` dropped."""
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]
    out: list[str] = []
    for value in raw:
        text = str(value).strip() if value is not None else ""
        if text and enum_key(text) != "all":
            out.append(text)
    return out


# --- identity and ownership -------------------------------------------------


def is_mine(rec: PreparedRecord, ctx: FilterContext) -> bool:
    """Missing identity never matches."""
    if ctx.current_user is None:
        return False
    identities = ctx.current_user.identities
    if not identities:
        return False
    return any(contains_identity(rec.get(f), identities) for f in ctx.profile.owner_fields)


def has_owner(rec: PreparedRecord, ctx: FilterContext) -> bool:
    return any(identity_set(rec.get(f)) for f in ctx.profile.owner_fields)


# --- single-dimension checks --------------------------------------------------


def _enum_in(field_name: str, accepted: list[str]) -> RecordPredicate:
    keys = {enum_key(v) for v in accepted}
    return lambda rec: enum_key(rec.get(field_name)) in keys


def _field_in(field_name: str, accepted: list[str]) -> RecordPredicate:
    wanted = {v.lower() for v in accepted}
    return lambda rec: bool(member_set(rec.get(field_name)) & wanted)


def _assignee_in(accepted: list[str], ctx: FilterContext) -> RecordPredicate:
    want_unassigned = any(enum_key(v) in _UNASSIGNED for v in accepted)
    ids = [v for v in accepted if enum_key(v) not in _UNASSIGNED]

    def check(rec: PreparedRecord) -> bool:
        if want_unassigned and not has_owner(rec, ctx):
            return True
        return bool(ids) and any(
            identity_set(rec.get(f)) & {i.lower() for i in ids} for f in ctx.profile.owner_fields
        )

    return check


def _tags_any(accepted: list[str]) -> RecordPredicate:
    wanted = {t.lower() for t in accepted}
    return lambda rec: bool(rec.tags & wanted)


def _scope_in(accepted: list[str], ctx: FilterContext) -> RecordPredicate | None:
    keys = {enum_key(v) for v in accepted}
    if any(k.startswith("all") for k in keys):
        return None
    if any(k.startswith("my") for k in keys):
        return lambda rec: is_mine(rec, ctx)
    logger.debug("ignoring unknown scope values: %s", sorted(keys))
    return None


def date_ranges_overlap(rec: PreparedRecord, rng: DateRange, profile: RecordProfile) -> bool:
    """Record interval [start, end] intersects [from, to]; open bounds are unbounded."""
    start = parse_day(rec.get(profile.start_field))
    end = parse_day(rec.get(profile.end_field))
    if start is None and end is None:
        return False
    start = start or end
    end = end or start
    lo = parse_day(rng.from_date)
    hi = parse_day(rng.to_date)
    return (hi is None or start <= hi) and (lo is None or end >= lo)


def _date_within(field_name: str, rng: DateRange) -> RecordPredicate:
    lo = parse_day(rng.from_date)
    hi = parse_day(rng.to_date)

    def check(rec: PreparedRecord) -> bool:
        day = parse_day(rec.get(field_name))
        if day is None:
            return False
        return (lo is None or day >= lo) and (hi is None or day <= hi)

    return check


def _has_comments(rec: PreparedRecord) -> bool:
    value = rec.get("comments")
    count = to_number(value, default=-1)
    if count >= 0:
        return count > 0
    return bool(normalize_list(value))


def _flag_check(flag: str, ctx: FilterContext) -> RecordPredicate | None:
    key = enum_key(flag)
    if key in ("hastasks", "hassubtasks"):
        return lambda rec: bool(rec.items)
    if key == "hasattachments":
        return lambda rec: bool(normalize_list(rec.get(ctx.profile.attachments_field)))
    if key == "hascomments":
        return _has_comments
    if key == "overdue":
        return lambda rec: is_overdue(rec.record, ctx.profile, ctx.now, config=ctx.config)
    if key in _UNASSIGNED:
        return lambda rec: not has_owner(rec, ctx)
    logger.debug("ignoring unknown filter flag %r", flag)
    return None


def dimension_checks(adv: AdvancedFilters, ctx: FilterContext) -> list[RecordPredicate]:
    """One check per non-empty dimension; AND across dimensions, OR within one."""
    profile = ctx.profile
    checks: list[RecordPredicate] = []

    scope = _values(adv.scope)
    if scope:
        check = _scope_in(scope, ctx)
        if check is not None:
            checks.append(check)

    status = _values(adv.status)
    if status:
        checks.append(_enum_in("status", status))

    priority = _values(adv.priority)
    if priority:
        checks.append(_enum_in("priority", priority))

    project = _values(adv.project)
    if project:
        checks.append(_field_in(profile.project_field, project))

    assignee = _values(adv.assignee)
    if assignee:
        checks.append(_assignee_in(assignee, ctx))

    tags = _values(adv.tags)
    if tags:
        checks.append(_tags_any(tags))

    if adv.date_range.active:
        rng = adv.date_range
        checks.append(lambda rec: date_ranges_overlap(rec, rng, profile))
    if adv.start_date_range.active:
        checks.append(_date_within(profile.start_field, adv.start_date_range))
    if adv.end_date_range.active:
        checks.append(_date_within(profile.end_field, adv.end_date_range))

    if adv.progress_range.active:
        progress = adv.progress_range
        checks.append(lambda rec: progress.contains(rec.metrics.progress_percent))
    if adv.estimate_range.active:
        if profile.estimate_field is None:
            logger.debug("%s records have no estimate field; ignoring estimate range", profile.kind)
        else:
            estimate, est_field = adv.estimate_range, profile.estimate_field
            checks.append(lambda rec: estimate.contains(to_number(rec.get(est_field))))
    if adv.team_size_range.active:
        team = adv.team_size_range
        checks.append(lambda rec: team.contains(len(normalize_list(rec.get(profile.team_field)))))

    for flag in _values(adv.flags):
        check = _flag_check(flag, ctx)
        if check is not None:
            checks.append(check)

    return checks


# --- quick filters ------------------------------------------------------------

_QUICK_DIMENSIONS: dict[str, str] = {
    "scope": "scope",
    "taskscope": "scope",
    "projectscope": "scope",
    "status": "status",
    "priority": "priority",
    "assignee": "assignee",
    "assignees": "assignee",
    "project": "project",
    "company": "project",
    "tags": "tags",
    "tag": "tags",
    "date": "date_range",
    "daterange": "date_range",
    "startdate": "start_date_range",
    "duedate": "end_date_range",
    "enddate": "end_date_range",
    "flags": "flags",
    "additionalfilters": "flags",
}

_RANGE_DIMENSIONS = {"date_range", "start_date_range", "end_date_range"}


def _quick_date(value: Any, now: datetime) -> DateRange | None:
    if isinstance(value, DateRange):
        return value if value.active else None
    if isinstance(value, Mapping):
        rng = DateRange(from_date=value.get("from"), to_date=value.get("to"))
        return rng if rng.active else None
    if isinstance(value, str):
        return resolve_date_preset(value, now)
    return None


def quick_checks(quick: Mapping[str, Any], ctx: FilterContext) -> list[RecordPredicate]:
    checks: list[RecordPredicate] = []
    for key, value in quick.items():
        dimension = _QUICK_DIMENSIONS.get(enum_key(key))

        if dimension in _RANGE_DIMENSIONS:
            rng = _quick_date(value, ctx.now)
            if rng is None:
                continue
            checks.extend(dimension_checks(replace(AdvancedFilters(), **{dimension: rng}), ctx))
            continue

        accepted = _values(value) if isinstance(value, (str, list, tuple)) else []
        if not accepted:
            continue
        if dimension is None:
            logger.debug("quick filter %r has no dimension; matching record field directly", key)
            checks.append(_field_in(str(key), accepted))
            continue
        checks.extend(dimension_checks(replace(AdvancedFilters(), **{dimension: tuple(accepted)}), ctx))
    return checks


# --- column filters -----------------------------------------------------------


def column_display_value(rec: PreparedRecord, column: str) -> str:
    if column in ("progress", "progressPercent"):
        return str(rec.metrics.progress_percent)
    if column == "completedCount":
        return str(rec.metrics.completed)
    if column == "totalCount":
        return str(rec.metrics.total)
    if column == "tags":
        return ", ".join(normalize_tags(rec.get("tags")))

    value = rec.get(column)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value if v is not None)
    return str(value)


def _column_check(column: str, text: str) -> RecordPredicate:
    if column in _ENUM_COLUMNS:
        accepted = {enum_key(part) for part in text.split(",") if part.strip()}
        return lambda rec: enum_key(rec.get(column)) in accepted
    needle = text.lower()
    return lambda rec: needle in column_display_value(rec, column).lower()


# --- layer builders -----------------------------------------------------------


def build_search(state: FilterState, ctx: FilterContext) -> RecordPredicate | None:
    term = (state.search or "").strip().lower()
    if not term:
        return None
    search_fields = ctx.profile.search_fields

    def check(rec: PreparedRecord) -> bool:
        for name in search_fields:
            value = rec.get(name)
            if value is not None and term in str(value).lower():
                return True
        return False

    return check


def build_predefined(state: FilterState, ctx: FilterContext) -> RecordPredicate | None:
    value = (state.predefined or "").strip()
    key = enum_key(value)
    if not key or key.startswith("all"):
        return None

    if key.startswith("my"):
        return lambda rec: is_mine(rec, ctx)
    if key == "overdue":
        return lambda rec: is_overdue(rec.record, ctx.profile, ctx.now, config=ctx.config)
    if key == "highpriority":
        return lambda rec: enum_key(rec.get("priority")) == "high"

    status = ctx.profile.canonical_status(value)
    if status is not None:
        return _enum_in("status", [status])
    if ctx.config.is_completion(value):
        return lambda rec: ctx.config.is_completion(rec.get("status"))

    logger.debug("unknown predefined filter %r treated as no constraint", value)
    return None


def build_advanced(state: FilterState, ctx: FilterContext) -> RecordPredicate | None:
    return _all(dimension_checks(state.advanced, ctx))


def build_quick(state: FilterState, ctx: FilterContext) -> RecordPredicate | None:
    return _all(quick_checks(state.quick or {}, ctx))


def build_columns(state: FilterState, ctx: FilterContext) -> RecordPredicate | None:
    checks = [
        _column_check(str(column), str(text).strip())
        for column, text in (state.columns or {}).items()
        if text is not None and str(text).strip()
    ]
    return _all(checks)


# Evaluation order; every layer is ANDed with the others.
LAYERS: dict[str, LayerBuilder] = {
    "search": build_search,
    "predefined": build_predefined,
    "advanced": build_advanced,
    "quick": build_quick,
    "columns": build_columns,
}
