"""View command - run the pipeline over an exported record set."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import EngineConfig
from ..filters.load import load_filter_state
from ..filters.schema import FilterState
from ..models import CurrentUser, SortState
from ..normalize import normalize_tags
from ..pipeline import process
from ..profiles import get_profile
from ..records import load_records

_STATUS_STYLES = {
    "completed": "green",
    "done": "green",
    "active": "cyan",
    "inprogress": "cyan",
    "onhold": "yellow",
    "overdue": "red",
}

_PRIORITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "dim"}


def _styled(value: Any, styles: dict[str, str]) -> str:
    text = "" if value is None else str(value)
    key = "".join(ch for ch in text.lower() if ch.isalnum())
    style = styles.get(key)
    text = escape(text)
    return f"[{style}]{text}[/{style}]" if style and text else text


def _owner(row: dict[str, Any]) -> str:
    owner = row.get("assignee")
    if isinstance(owner, (list, tuple)):
        return ", ".join(str(o) for o in owner)
    return str(owner) if owner else ""


def reference_records(
    kind: str,
    records: list[dict[str, Any]],
    aux: list[dict[str, Any]] | None,
) -> list[dict[str, Any]] | None:
    """Subtask IDs name other tasks in the same export; project task IDs need --aux."""
    if aux is not None:
        return aux
    return records if kind == "task" else None


def apply_overrides(
    state: FilterState,
    sort: SortState,
    *,
    search: str | None = None,
    predefined: str | None = None,
    column_filters: dict[str, str] | None = None,
    sort_field: str | None = None,
    direction: str | None = None,
) -> tuple[FilterState, SortState]:
    """Command-line options win over a loaded filter file."""
    if search is not None:
        state = replace(state, search=search)
    if predefined is not None:
        state = replace(state, predefined=predefined)
    if column_filters:
        state = replace(state, columns={**state.columns, **column_filters})
    if sort_field:
        sort = SortState(field=sort_field, direction=direction or sort.direction)  # type: ignore[arg-type]
    elif direction:
        sort = replace(sort, direction=direction)  # type: ignore[arg-type]
    return state, sort


def run_view(
    records_path: Path,
    *,
    kind: str = "task",
    filters_path: Path | None = None,
    search: str | None = None,
    predefined: str | None = None,
    column_filters: dict[str, str] | None = None,
    sort_field: str | None = None,
    direction: str | None = None,
    user: CurrentUser | None = None,
    aux_path: Path | None = None,
    output_json: bool = False,
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> int:
    err = Console(stderr=True)
    console = Console()

    try:
        records = load_records(records_path)
        aux = load_records(aux_path) if aux_path else None
        state, sort = load_filter_state(filters_path) if filters_path else (FilterState(), SortState())
    except (OSError, ValueError) as e:
        err.print(escape(str(e)), style="bold red")
        return 1

    state, sort = apply_overrides(
        state,
        sort,
        search=search,
        predefined=predefined,
        column_filters=column_filters,
        sort_field=sort_field,
        direction=direction,
    )
    profile = get_profile(kind)
    rows = process(
        records,
        state,
        sort,
        kind=profile,
        current_user=user,
        all_records=reference_records(profile.kind, records, aux),
        now=now,
        config=config,
    )

    if output_json:
        print(json.dumps(rows, indent=2, default=str))
        return 0

    table = Table(title=f"{profile.kind.capitalize()}s ({len(rows)} of {len(records)})")
    table.add_column("id", style="dim", no_wrap=True)
    table.add_column(profile.title_field)
    table.add_column("status")
    table.add_column("priority")
    table.add_column("assignee", style="magenta")
    table.add_column(profile.end_field)
    table.add_column("progress", justify="right")
    table.add_column("tags", style="cyan")

    for row in rows:
        table.add_row(
            escape(str(row.get("id", ""))),
            escape(str(row.get(profile.title_field) or "")),
            _styled(row.get("status"), _STATUS_STYLES),
            _styled(row.get("priority"), _PRIORITY_STYLES),
            escape(_owner(row)),
            str(row.get(profile.end_field) or ""),
            f"{row['completedCount']}/{row['totalCount']} ({row['progressPercent']}%)",
            escape(", ".join(normalize_tags(row.get("tags")))),
        )

    console.print(table)
    if not rows:
        err.print("No records match the current filters.", style="yellow")
    return 0
