"""Relative date presets offered by the quick-filter date dropdown."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from ..profiles import enum_key
from .schema import DateRange


def _span(start: date, end: date) -> DateRange:
    return DateRange(from_date=start.isoformat(), to_date=end.isoformat())


def resolve_date_preset(preset: str, now: datetime) -> DateRange | None:
    """
    Resolve `today`, `thisWeek`, `thisMonth` or `next7Days` against `now`.

    Weeks run Monday through Sunday. Returns None for `all`, empty or unknown
    presets (no constraint).
    """
    today = now.date()
    key = enum_key(preset)

    if key == "today":
        return _span(today, today)
    if key == "thisweek":
        monday = today - timedelta(days=today.weekday())
        return _span(monday, monday + timedelta(days=6))
    if key == "thismonth":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return _span(today.replace(day=1), today.replace(day=last_day))
    if key == "next7days":
        return _span(today, today + timedelta(days=7))
    return None
