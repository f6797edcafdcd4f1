"""Layered record filters (state as data, predicates as code)."""

from .engine import build_predicates, filter_records, make_context, matches
from .load import filter_state_from_dict, load_filter_state, sort_state_from_dict
from .schema import AdvancedFilters, DateRange, FilterState, NumberRange

__all__ = [
    "AdvancedFilters",
    "DateRange",
    "FilterState",
    "NumberRange",
    "build_predicates",
    "filter_records",
    "filter_state_from_dict",
    "load_filter_state",
    "make_context",
    "matches",
    "sort_state_from_dict",
]
