"""Koski study right timelines for preparatory education.

Koski only wants to know about absence periods longer than a week. Short
absences are reported as presence. Weekends and holidays in the middle of
an absence streak don't break the streak, but they never extend it either.
"""

from __future__ import annotations

from datetime import date
from typing import AbstractSet, Iterable, Optional

from ..core.constants import KOSKI_MAX_SHORT_ABSENCE_DAYS, MONDAY_TO_FRIDAY
from ..core.enums import AbsenceType, KoskiStatus
from ..core.exceptions import ValidationError
from ..shared.date_range import ONE_DAY, FiniteDateRange
from ..shared.date_set import DateSet
from ..shared.operational_days import is_operational_date
from .model import KoskiPreparatoryAbsence, StudyRightPeriod, StudyRightTimelines

PLANNED_ABSENCE_TYPES = frozenset({AbsenceType.PLANNED_ABSENCE, AbsenceType.OTHER_ABSENCE})
SICK_LEAVE_ABSENCE_TYPES = frozenset({AbsenceType.SICKLEAVE})
UNKNOWN_ABSENCE_TYPES = frozenset({AbsenceType.UNKNOWN_ABSENCE})


def _bridge_non_operational_gaps(dates: DateSet, holidays: AbstractSet[date]) -> DateSet:
    filled = [
        gap
        for gap in dates.gaps()
        if not any(is_operational_date(d, MONDAY_TO_FRIDAY, holidays) for d in gap.dates())
    ]
    return dates.add_all(filled)


def _long_absences(dates: Iterable[date], holidays: AbstractSet[date]) -> DateSet:
    joined = _bridge_non_operational_gaps(DateSet.of_dates(dates), holidays)
    return DateSet(r for r in joined.ranges() if r.duration_in_days() > KOSKI_MAX_SHORT_ABSENCE_DAYS)


def calculate_study_right_timelines(
    *,
    placements: DateSet,
    holidays: AbstractSet[date],
    absences: Iterable[KoskiPreparatoryAbsence],
) -> StudyRightTimelines:
    by_type: dict[AbsenceType, list[date]] = {}
    for a in absences:
        by_type.setdefault(a.type, []).append(a.date)

    def dates_of(types: AbstractSet[AbsenceType]) -> list[date]:
        return [d for t in types for d in by_type.get(t, [])]

    planned = _long_absences(dates_of(PLANNED_ABSENCE_TYPES), holidays).intersection(placements)
    sick_leave = _long_absences(dates_of(SICK_LEAVE_ABSENCE_TYPES), holidays).intersection(placements)
    unknown = _long_absences(dates_of(UNKNOWN_ABSENCE_TYPES), holidays).intersection(placements)

    return StudyRightTimelines(
        placement=placements,
        present=placements.remove_all(planned).remove_all(sick_leave).remove_all(unknown),
        planned_absence=planned,
        sick_leave_absence=sick_leave,
        unknown_absence=unknown,
    )


def to_study_right_periods(
    timelines: StudyRightTimelines,
    *,
    termination: Optional[KoskiStatus] = None,
) -> list[StudyRightPeriod]:
    """Flatten the timelines into status changes ordered by start date.

    `termination` (QUALIFIED or RESIGNED) starts the day after the last placement day.
    """

    if termination is not None and termination not in (KoskiStatus.QUALIFIED, KoskiStatus.RESIGNED):
        raise ValidationError(f"Not a terminal study right status: {termination.value}")

    tagged: list[tuple[FiniteDateRange, KoskiStatus]] = []
    tagged += [(r, KoskiStatus.PRESENT) for r in timelines.present.ranges()]
    tagged += [(r, KoskiStatus.HOLIDAY) for r in timelines.planned_absence.ranges()]
    tagged += [(r, KoskiStatus.INTERRUPTED) for r in timelines.sick_leave_absence.ranges()]
    tagged += [(r, KoskiStatus.INTERRUPTED) for r in timelines.unknown_absence.ranges()]
    tagged.sort(key=lambda item: item[0].start)

    periods: list[StudyRightPeriod] = []
    for r, status in tagged:
        if periods and periods[-1].status == status:
            continue
        periods.append(StudyRightPeriod(start=r.start, status=status))

    span = timelines.placement.spanning_range()
    if termination is not None and span is not None:
        periods.append(StudyRightPeriod(start=span.end + ONE_DAY, status=termination))
    return periods
