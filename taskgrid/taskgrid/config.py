"""Engine configuration (completion statuses, rank tables, default sorts)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .profiles import enum_key

CONFIG_FILENAME = "taskgrid.toml"


def _default_priority_ranks() -> dict[str, int]:
    return {"High": 1, "Medium": 2, "Low": 3}


def _default_sort() -> dict[str, str]:
    return {"task": "dueDate", "project": "name"}


@dataclass(frozen=True)
class EngineConfig:
    completion_values: tuple[str, ...] = ("completed", "done", "closed")
    priority_ranks: dict[str, int] = field(default_factory=_default_priority_ranks)
    default_sort: dict[str, str] = field(default_factory=_default_sort)

    def is_completion(self, status: Any) -> bool:
        if status is None:
            return False
        key = enum_key(status)
        return bool(key) and key in {enum_key(v) for v in self.completion_values}

    def priority_rank(self, priority: Any) -> int:
        """Rank from the table; unknown priorities sort after every known one."""
        key = enum_key(priority)
        for name, rank in self.priority_ranks.items():
            if enum_key(name) == key:
                return rank
        return max(self.priority_ranks.values(), default=0) + 1

    def default_sort_field(self, kind: str) -> str:
        return self.default_sort.get(kind, "")

    def __hash__(self) -> int:
        # Hashable so callers can memoize on (records key, state, config).
        return hash(
            (
                self.completion_values,
                frozenset(self.priority_ranks.items()),
                frozenset(self.default_sort.items()),
            )
        )


DEFAULT_CONFIG = EngineConfig()


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def config_from_dict(data: dict[str, Any]) -> EngineConfig:
    completion = data.get("completion_values", DEFAULT_CONFIG.completion_values)
    if not isinstance(completion, (list, tuple)) or not all(isinstance(v, str) for v in completion):
        raise ValueError("completion_values must be a list of strings")
    completion_values = tuple(v.strip() for v in completion if v.strip())
    if not completion_values:
        raise ValueError("completion_values must not be empty")

    ranks_raw = _coerce_dict(data.get("priority_ranks")) or DEFAULT_CONFIG.priority_ranks
    priority_ranks: dict[str, int] = {}
    for name, rank in ranks_raw.items():
        try:
            priority_ranks[str(name)] = int(rank)
        except (TypeError, ValueError):
            raise ValueError(f"priority rank for {name!r} must be an integer") from None

    default_sort = dict(DEFAULT_CONFIG.default_sort)
    for kind, field_name in _coerce_dict(data.get("default_sort")).items():
        if isinstance(field_name, str) and field_name.strip():
            default_sort[str(kind).strip().lower()] = field_name.strip()

    return EngineConfig(
        completion_values=completion_values,
        priority_ranks=priority_ranks,
        default_sort=default_sort,
    )


def load_config(path: Path) -> EngineConfig:
    """
    Load engine configuration from TOML.

    Every key is optional; omitted keys keep their defaults.
    """
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"{path}: invalid TOML ({e})") from e
    return config_from_dict(data)


def find_config(start: Path) -> Path | None:
    """Find a taskgrid.toml by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
