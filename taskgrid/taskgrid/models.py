"""Data models shared by the normalizers, filters and ordering."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Literal, Mapping

Direction = Literal["asc", "desc"]

Record = Mapping[str, Any]


@dataclass(frozen=True)
class DerivedMetrics:
    """Counts derived from a record's reference list (never persisted)."""

    completed: int
    total: int
    progress_percent: int

    def as_display_fields(self) -> dict[str, int]:
        return {
            "progressPercent": self.progress_percent,
            "completedCount": self.completed,
            "totalCount": self.total,
        }


@dataclass(frozen=True)
class CurrentUser:
    """Identity used by the `my-*` predicates."""

    id: str | None = None
    name: str | None = None
    email: str | None = None

    @property
    def identities(self) -> list[str]:
        return [v.strip() for v in (self.id, self.name, self.email) if isinstance(v, str) and v.strip()]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> CurrentUser | None:
        if not data:
            return None
        user = cls(
            id=_opt_str(data.get("id") or data.get("$id")),
            name=_opt_str(data.get("name")),
            email=_opt_str(data.get("email")),
        )
        return user if user.identities else None


@dataclass(frozen=True)
class SortState:
    field: str = ""
    direction: Direction = "asc"
    column_sorts: Mapping[str, Direction | None] = dataclasses.field(default_factory=dict)


@dataclass(frozen=True)
class PreparedRecord:
    """A record plus its canonical fields, computed once per call."""

    record: Record
    tags: frozenset[str]
    items: list[Any]
    metrics: DerivedMetrics

    def get(self, key: str, default: Any = None) -> Any:
        return self.record.get(key, default)


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
