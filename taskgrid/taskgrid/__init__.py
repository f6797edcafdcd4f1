"""taskgrid - record normalization, filtering and ordering for task/project lists."""

__version__ = "0.1.0"

from .config import DEFAULT_CONFIG, EngineConfig, load_config
from .filters import AdvancedFilters, DateRange, FilterState, NumberRange, matches
from .metrics import derive_progress, is_overdue
from .models import CurrentUser, DerivedMetrics, SortState
from .normalize import contains_identity, normalize_list, normalize_tags, resolve_references
from .ordering import compare, sort_records
from .pipeline import process

__all__ = [
    "AdvancedFilters",
    "CurrentUser",
    "DEFAULT_CONFIG",
    "DateRange",
    "DerivedMetrics",
    "EngineConfig",
    "FilterState",
    "NumberRange",
    "SortState",
    "__version__",
    "compare",
    "contains_identity",
    "derive_progress",
    "is_overdue",
    "load_config",
    "matches",
    "normalize_list",
    "normalize_tags",
    "process",
    "resolve_references",
    "sort_records",
]
