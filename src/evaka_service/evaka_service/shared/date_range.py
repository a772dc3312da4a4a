from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator, Optional, Union

from ..core.exceptions import ValidationError

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, order=True)
class FiniteDateRange:
    """Date range with inclusive start and end."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError(f"Invalid date range: {self.start} - {self.end}")

    @classmethod
    def of_day(cls, d: date) -> "FiniteDateRange":
        return cls(d, d)

    @classmethod
    def of_month(cls, year: int, month: int) -> "FiniteDateRange":
        last_day = calendar.monthrange(year, month)[1]
        return cls(date(year, month, 1), date(year, month, last_day))

    def dates(self) -> Iterator[date]:
        d = self.start
        while d <= self.end:
            yield d
            d += ONE_DAY

    def duration_in_days(self) -> int:
        return (self.end - self.start).days + 1

    def includes(self, other: Union[date, "FiniteDateRange"]) -> bool:
        if isinstance(other, FiniteDateRange):
            return self.start <= other.start and other.end <= self.end
        return self.start <= other <= self.end

    def overlaps(self, other: "FiniteDateRange") -> bool:
        return self.start <= other.end and other.start <= self.end

    def intersection(self, other: "FiniteDateRange") -> Optional["FiniteDateRange"]:
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if end < start:
            return None
        return FiniteDateRange(start, end)

    def adjacent_to(self, other: "FiniteDateRange") -> bool:
        return self.end + ONE_DAY == other.start or other.end + ONE_DAY == self.start

    def span(self, other: "FiniteDateRange") -> "FiniteDateRange":
        return FiniteDateRange(min(self.start, other.start), max(self.end, other.end))

    def as_date_range(self) -> "DateRange":
        return DateRange(self.start, self.end)

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()}]"


@dataclass(frozen=True)
class DateRange:
    """Date range with inclusive start and an optional (open) end."""

    start: date
    end: Optional[date] = None

    def __post_init__(self) -> None:
        if self.end is not None and self.end < self.start:
            raise ValidationError(f"Invalid date range: {self.start} - {self.end}")

    def _end_or_max(self) -> date:
        return self.end if self.end is not None else date.max

    def includes(self, d: date) -> bool:
        return self.start <= d <= self._end_or_max()

    def overlaps(self, other: "DateRange") -> bool:
        return self.start <= other._end_or_max() and other.start <= self._end_or_max()

    def contains(self, other: "DateRange") -> bool:
        """True when the whole of `other` lies inside this range."""
        if other.start < self.start:
            return False
        if self.end is None:
            return True
        return other.end is not None and other.end <= self.end

    def intersection(self, other: "DateRange") -> Optional["DateRange"]:
        start = max(self.start, other.start)
        ends = [e for e in (self.end, other.end) if e is not None]
        end = min(ends) if ends else None
        if end is not None and end < start:
            return None
        return DateRange(start, end)

    def with_end(self, end: Optional[date]) -> "DateRange":
        return DateRange(self.start, end)

    def as_finite(self) -> FiniteDateRange:
        if self.end is None:
            raise ValidationError("Date range has no end")
        return FiniteDateRange(self.start, self.end)

    def __str__(self) -> str:
        end = self.end.isoformat() if self.end else ""
        return f"[{self.start.isoformat()}, {end}]"
