from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence, Union

from ..normalize import parse_day


@dataclass(frozen=True)
class DateRange:
    from_date: str | None = None
    to_date: str | None = None

    @property
    def active(self) -> bool:
        return parse_day(self.from_date) is not None or parse_day(self.to_date) is not None


@dataclass(frozen=True)
class NumberRange:
    min: float | None = None
    max: float | None = None

    @property
    def active(self) -> bool:
        return self.min is not None or self.max is not None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class AdvancedFilters:
    scope: Sequence[str] = ()
    status: Sequence[str] = ()
    priority: Sequence[str] = ()
    assignee: Sequence[str] = ()
    project: Sequence[str] = ()
    tags: Sequence[str] = ()
    date_range: DateRange = field(default_factory=DateRange)
    start_date_range: DateRange = field(default_factory=DateRange)
    end_date_range: DateRange = field(default_factory=DateRange)
    progress_range: NumberRange = field(default_factory=NumberRange)
    estimate_range: NumberRange = field(default_factory=NumberRange)
    team_size_range: NumberRange = field(default_factory=NumberRange)
    flags: Sequence[str] = ()


QuickValue = Union[str, Sequence[str], DateRange]


@dataclass(frozen=True)
class FilterState:
    search: str = ""
    predefined: str = "all"
    advanced: AdvancedFilters = field(default_factory=AdvancedFilters)
    quick: Mapping[str, QuickValue] = field(default_factory=dict)
    columns: Mapping[str, str] = field(default_factory=dict)
