from __future__ import annotations

import logging
from typing import Optional

from ..absences.repository import AbsenceRepository
from ..common.validators import require_positive_id
from ..core.enums import AbsenceCategory, KoskiStatus, PlacementType
from ..daycare.repository import HolidayRepository
from ..placements.repository import PlacementRepository
from ..shared.date_range import FiniteDateRange
from ..shared.date_set import DateSet
from .model import KoskiPreparatoryAbsence, StudyRightPeriod, StudyRightTimelines
from .timelines import calculate_study_right_timelines, to_study_right_periods

_LOGGER = logging.getLogger(__name__)

PREPARATORY_PLACEMENT_TYPES = (PlacementType.PREPARATORY, PlacementType.PREPARATORY_DAYCARE)


class KoskiService:
    """Builds the preparatory education study right data for a child."""

    def __init__(
        self,
        placements: PlacementRepository,
        holidays: HolidayRepository,
        absences: AbsenceRepository,
    ):
        self._placements = placements
        self._holidays = holidays
        self._absences = absences

    def get_timelines(self, *, child_id: int, period: FiniteDateRange) -> StudyRightTimelines:
        child_id = require_positive_id(child_id, "child_id")

        placements = self._placements.get_placements_for_children(
            child_ids=[child_id], types=PREPARATORY_PLACEMENT_TYPES
        )
        placement_dates = DateSet(p.period for p in placements).intersection([period])

        span = placement_dates.spanning_range()
        if span is None:
            return calculate_study_right_timelines(placements=placement_dates, holidays=set(), absences=[])

        holidays = self._holidays.get_holidays(span)
        absences = [
            KoskiPreparatoryAbsence(date=a.date, type=a.absence_type)
            for a in self._absences.get_absences_for_child(child_id=child_id, period=span)
            if a.category == AbsenceCategory.NONBILLABLE
        ]
        _LOGGER.debug(
            "Koski timelines for child %s: %d placement ranges, %d absences",
            child_id,
            len(placement_dates.ranges()),
            len(absences),
        )
        return calculate_study_right_timelines(placements=placement_dates, holidays=holidays, absences=absences)

    def get_study_right_periods(
        self,
        *,
        child_id: int,
        period: FiniteDateRange,
        termination: Optional[KoskiStatus] = None,
    ) -> list[StudyRightPeriod]:
        timelines = self.get_timelines(child_id=child_id, period=period)
        return to_study_right_periods(timelines, termination=termination)
