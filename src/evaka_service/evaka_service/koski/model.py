from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import AbsenceType, KoskiStatus
from ..shared.date_set import DateSet


@dataclass(frozen=True)
class KoskiPreparatoryAbsence:
    date: date
    type: AbsenceType


@dataclass(frozen=True)
class StudyRightTimelines:
    placement: DateSet
    present: DateSet
    planned_absence: DateSet
    sick_leave_absence: DateSet
    unknown_absence: DateSet


@dataclass(frozen=True)
class StudyRightPeriod:
    """One entry of the study right status history sent to Koski."""

    start: date
    status: KoskiStatus
