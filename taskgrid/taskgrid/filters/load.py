from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..models import SortState
from .schema import AdvancedFilters, DateRange, FilterState, NumberRange


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _get(data: dict[str, Any], *names: str) -> Any:
    for name in names:
        if name in data:
            return data[name]
    return None


def _str_list(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(v).strip() for v in value if v is not None and str(v).strip())


def _opt_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _date_range(value: Any) -> DateRange:
    raw = _coerce_dict(value)
    return DateRange(
        from_date=_opt_text(_get(raw, "from", "from_date")),
        to_date=_opt_text(_get(raw, "to", "to_date")),
    )


def _opt_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _number_range(value: Any) -> NumberRange:
    raw = _coerce_dict(value)
    return NumberRange(min=_opt_number(raw.get("min")), max=_opt_number(raw.get("max")))


def advanced_from_dict(data: Any) -> AdvancedFilters:
    raw = _coerce_dict(data)
    return AdvancedFilters(
        scope=_str_list(_get(raw, "scope", "taskScope", "projectScope")),
        status=_str_list(raw.get("status")),
        priority=_str_list(raw.get("priority")),
        assignee=_str_list(raw.get("assignee")),
        project=_str_list(_get(raw, "project", "company")),
        tags=_str_list(raw.get("tags")),
        date_range=_date_range(_get(raw, "date_range", "dateRange", "dueDateRange")),
        start_date_range=_date_range(_get(raw, "start_date_range", "startDateRange")),
        end_date_range=_date_range(_get(raw, "end_date_range", "endDateRange")),
        progress_range=_number_range(_get(raw, "progress_range", "progressRange")),
        estimate_range=_number_range(_get(raw, "estimate_range", "estimateRange", "timeEstimateRange")),
        team_size_range=_number_range(_get(raw, "team_size_range", "teamSizeRange")),
        flags=_str_list(_get(raw, "flags", "additionalFilters")),
    )


def _quick_value(value: Any) -> Any:
    if isinstance(value, dict):
        return _date_range(value)
    if isinstance(value, (list, tuple)):
        return _str_list(value)
    if value is None:
        return ""
    return str(value)


def filter_state_from_dict(data: Any) -> FilterState:
    """
    Build a FilterState from the dashboard's camelCase state (or snake_case).

    Unknown keys are ignored and wrongly typed values become "no constraint".
    """
    raw = _coerce_dict(data)
    quick = {str(k): _quick_value(v) for k, v in _coerce_dict(_get(raw, "quick", "quickFilters")).items()}
    columns = {
        str(k): str(v) for k, v in _coerce_dict(_get(raw, "columns", "columnFilters")).items() if v is not None
    }
    search = _get(raw, "search", "searchTerm")
    predefined = _get(raw, "predefined", "predefinedFilter")
    return FilterState(
        search=str(search) if isinstance(search, str) else "",
        predefined=str(predefined) if isinstance(predefined, str) and predefined.strip() else "all",
        advanced=advanced_from_dict(_get(raw, "advanced", "advancedFilters")),
        quick=quick,
        columns=columns,
    )


def _direction(value: Any) -> str | None:
    text = str(value).strip().lower() if value is not None else ""
    return text if text in ("asc", "desc") else None


def sort_state_from_dict(data: Any) -> SortState:
    raw = _coerce_dict(data)
    column_sorts = {
        str(k): _direction(v) for k, v in _coerce_dict(_get(raw, "column_sorts", "columnSorts")).items()
    }
    sort_field = _get(raw, "field", "sortField", "sortBy")
    return SortState(
        field=str(sort_field).strip() if sort_field is not None else "",
        direction=_direction(_get(raw, "direction", "sortDirection", "sortOrder")) or "asc",  # type: ignore[arg-type]
        column_sorts=column_sorts,  # type: ignore[arg-type]
    )


def _read_structured(path: Path) -> dict[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix == ".toml":
        import tomllib

        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"{path}: invalid TOML ({e})") from e
    elif suffix in (".yaml", ".yml"):
        import yaml  # type: ignore

        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: invalid YAML ({e})") from e
    elif suffix == ".json":
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ValueError(f"{path}: invalid JSON ({e})") from e
    else:
        raise ValueError(f"{path}: unsupported filter file type {suffix!r} (use .toml, .yaml or .json)")

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def load_filter_state(path: Path) -> tuple[FilterState, SortState]:
    """
    Load a saved filter/sort state.

    The filter layers live under `filters` (or at the top level); the sort
    state under `sort`.
    """
    data = _read_structured(path)
    filters = _get(data, "filters", "filterState")
    sort = _get(data, "sort", "sortState")
    return filter_state_from_dict(filters if isinstance(filters, dict) else data), sort_state_from_dict(sort)
