from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import ScheduleType
from ..shared.date_range import FiniteDateRange
from ..shared.date_set import DateSet


@dataclass(frozen=True)
class Daycare:
    daycare_id: int
    name: str
    area_code: Optional[int]
    operation_days: frozenset[int]
    language: str = "fi"


@dataclass(frozen=True)
class PreschoolTerm:
    """A preschool year.

    `extended_term` is when connected daycare is available, usually starting
    a few weeks before the actual preschool. Applications are accepted until
    the end of the extended term, even after the application period ends.
    Preschool is not arranged during `term_breaks` (e.g. Christmas holiday).
    """

    finnish_preschool: FiniteDateRange
    swedish_preschool: FiniteDateRange
    extended_term: FiniteDateRange
    application_period: FiniteDateRange
    term_breaks: DateSet
    term_id: Optional[int] = None

    def is_application_accepted(self, d: date) -> bool:
        return FiniteDateRange(self.application_period.start, self.extended_term.end).includes(d)

    def schedule_type(self, d: date) -> Optional[ScheduleType]:
        if not self.finnish_preschool.includes(d):
            return None
        if self.term_breaks.includes(d):
            return ScheduleType.TERM_BREAK
        return ScheduleType.FIXED_SCHEDULE
