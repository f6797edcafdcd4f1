"""Stats command - the dashboard's summary cards for a record set."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import DEFAULT_CONFIG, EngineConfig
from ..metrics import is_overdue
from ..models import Record
from ..pipeline import prepare_all
from ..profiles import get_profile
from ..records import load_records
from .view import reference_records

OTHER_STATUS = "Other"


@dataclass(frozen=True)
class BoardStats:
    kind: str
    total: int
    by_status: dict[str, int]
    overdue: int
    average_progress: int


def compute_stats(
    records: Sequence[Record],
    *,
    kind: str = "task",
    all_records: Sequence[Record] | None = None,
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> BoardStats:
    """Count records per canonical status, overdue records, and mean derived progress."""
    profile = get_profile(kind)
    config = config or DEFAULT_CONFIG
    now = now or datetime.now(timezone.utc)

    prepared = prepare_all(records, profile, all_records=all_records, config=config)

    by_status = {status: 0 for status in profile.statuses}
    overdue = 0
    progress_sum = 0
    for rec in prepared:
        status = profile.canonical_status(rec.get("status"))
        if status is None:
            by_status[OTHER_STATUS] = by_status.get(OTHER_STATUS, 0) + 1
        else:
            by_status[status] += 1
        if is_overdue(rec.record, profile, now, config=config):
            overdue += 1
        progress_sum += rec.metrics.progress_percent

    average = int(progress_sum / len(prepared) + 0.5) if prepared else 0
    return BoardStats(
        kind=profile.kind,
        total=len(prepared),
        by_status=by_status,
        overdue=overdue,
        average_progress=average,
    )


def run_stats(
    records_path: Path,
    *,
    kind: str = "task",
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
    except (OSError, ValueError) as e:
        err.print(escape(str(e)), style="bold red")
        return 1

    profile = get_profile(kind)
    stats = compute_stats(
        records,
        kind=profile.kind,
        all_records=reference_records(profile.kind, records, aux),
        now=now,
        config=config,
    )

    if output_json:
        print(json.dumps(asdict(stats), indent=2))
        return 0

    table = Table(title=f"{stats.kind.capitalize()} summary")
    table.add_column("metric")
    table.add_column("value", justify="right")
    table.add_row(f"Total {stats.kind}s", str(stats.total))
    for status, count in stats.by_status.items():
        table.add_row(status, str(count))
    table.add_row("Overdue", f"[red]{stats.overdue}[/red]" if stats.overdue else "0")
    table.add_row("Average progress", f"{stats.average_progress}%")
    console.print(table)
    return 0
