from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.validators import require_role
from ..core.enums import Role
from ..core.exceptions import ConflictError, ValidationError
from ..shared.date_range import FiniteDateRange
from ..shared.operational_days import OperationalDays, build_operational_days
from .model import Daycare, PreschoolTerm
from .repository import DaycareRepository, HolidayRepository, PreschoolTermRepository

_LOGGER = logging.getLogger(__name__)


class DaycareService:
    def __init__(
        self,
        daycares: DaycareRepository,
        holidays: HolidayRepository,
        preschool_terms: PreschoolTermRepository,
    ):
        self._daycares = daycares
        self._holidays = holidays
        self._terms = preschool_terms

    def list_daycares(self) -> list[Daycare]:
        return sorted(self._daycares.list_daycares(), key=lambda d: d.name)

    def operational_days(self, year: int, month: int) -> OperationalDays:
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")

        period = FiniteDateRange.of_month(int(year), int(month))
        holidays = self._holidays.get_holidays(period)
        unit_operation_days = {d.daycare_id: d.operation_days for d in self._daycares.list_daycares()}
        return build_operational_days(
            int(year), int(month), holidays=holidays, unit_operation_days=unit_operation_days
        )

    def add_holiday(self, *, current_role: Role, holiday: date, description: Optional[str] = None) -> None:
        require_role(current_role, {Role.ADMIN})
        self._holidays.upsert_holiday(holiday=holiday, description=(description or "").strip() or None)

    def get_preschool_terms(self) -> list[PreschoolTerm]:
        return list(self._terms.get_preschool_terms())

    def get_active_preschool_term_at(self, d: date) -> Optional[PreschoolTerm]:
        return next((t for t in self._terms.get_preschool_terms() if t.extended_term.includes(d)), None)

    def insert_preschool_term(self, *, current_role: Role, term: PreschoolTerm) -> int:
        require_role(current_role, {Role.ADMIN})

        if not term.extended_term.includes(term.finnish_preschool):
            raise ValidationError("Extended term must cover the finnish preschool term")
        if not term.finnish_preschool.includes(term.term_breaks.spanning_range() or term.finnish_preschool):
            raise ValidationError("Term breaks must be within the finnish preschool term")

        for existing in self._terms.get_preschool_terms():
            if existing.extended_term.overlaps(term.extended_term):
                raise ConflictError(f"Preschool term overlaps an existing term {existing.extended_term}")

        term_id = self._terms.insert_preschool_term(term)
        _LOGGER.info("Created preschool term %s (%s)", term_id, term.extended_term)
        return term_id
