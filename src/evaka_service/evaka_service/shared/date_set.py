from __future__ import annotations

from datetime import date
from typing import Iterable, Iterator, Optional, Union

from .date_range import ONE_DAY, FiniteDateRange


def _normalize(ranges: Iterable[FiniteDateRange]) -> list[FiniteDateRange]:
    out: list[FiniteDateRange] = []
    for r in sorted(ranges):
        if out and (out[-1].overlaps(r) or out[-1].adjacent_to(r)):
            out[-1] = out[-1].span(r)
        else:
            out.append(r)
    return out


class DateSet:
    """Immutable set of dates, stored as sorted non-overlapping non-adjacent ranges."""

    __slots__ = ("_ranges",)

    def __init__(self, ranges: Iterable[FiniteDateRange] = ()):
        self._ranges: tuple[FiniteDateRange, ...] = tuple(_normalize(ranges))

    @classmethod
    def of(cls, *ranges: FiniteDateRange) -> "DateSet":
        return cls(ranges)

    @classmethod
    def of_dates(cls, dates: Iterable[date]) -> "DateSet":
        return cls(FiniteDateRange.of_day(d) for d in dates)

    def ranges(self) -> tuple[FiniteDateRange, ...]:
        return self._ranges

    def is_empty(self) -> bool:
        return not self._ranges

    def spanning_range(self) -> Optional[FiniteDateRange]:
        if not self._ranges:
            return None
        return FiniteDateRange(self._ranges[0].start, self._ranges[-1].end)

    def includes(self, value: Union[date, FiniteDateRange]) -> bool:
        return any(r.includes(value) for r in self._ranges)

    def dates(self) -> Iterator[date]:
        for r in self._ranges:
            yield from r.dates()

    def gaps(self) -> Iterator[FiniteDateRange]:
        for prev, nxt in zip(self._ranges, self._ranges[1:]):
            yield FiniteDateRange(prev.end + ONE_DAY, nxt.start - ONE_DAY)

    def add_all(self, other: Union["DateSet", Iterable[FiniteDateRange]]) -> "DateSet":
        extra = other.ranges() if isinstance(other, DateSet) else tuple(other)
        return DateSet(self._ranges + extra)

    def remove_all(self, other: Union["DateSet", Iterable[FiniteDateRange]]) -> "DateSet":
        removed = other if isinstance(other, DateSet) else DateSet(other)
        out: list[FiniteDateRange] = []
        for r in self._ranges:
            cursor: Optional[date] = r.start
            for cut in removed.ranges():
                if cursor is None or cut.start > r.end:
                    break
                if cut.end < cursor:
                    continue
                if cut.start > cursor:
                    out.append(FiniteDateRange(cursor, cut.start - ONE_DAY))
                cursor = cut.end + ONE_DAY if cut.end < r.end else None
            if cursor is not None:
                out.append(FiniteDateRange(cursor, r.end))
        return DateSet(out)

    def intersection(self, other: Union["DateSet", Iterable[FiniteDateRange]]) -> "DateSet":
        other_ranges = other.ranges() if isinstance(other, DateSet) else tuple(other)
        out = []
        for a in self._ranges:
            for b in other_ranges:
                common = a.intersection(b)
                if common:
                    out.append(common)
        return DateSet(out)

    __or__ = add_all
    __sub__ = remove_all
    __and__ = intersection

    def __iter__(self) -> Iterator[FiniteDateRange]:
        return iter(self._ranges)

    def __bool__(self) -> bool:
        return bool(self._ranges)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DateSet):
            return NotImplemented
        return self._ranges == other._ranges

    def __hash__(self) -> int:
        return hash(self._ranges)

    def __repr__(self) -> str:
        return "DateSet(" + ", ".join(str(r) for r in self._ranges) + ")"
