from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import AbstractSet, Mapping

from ..core.constants import ALL_WEEKDAYS, MONDAY_TO_FRIDAY
from .date_range import FiniteDateRange


def is_operational_date(d: date, operation_days: AbstractSet[int], holidays: AbstractSet[date]) -> bool:
    """`operation_days` holds ISO weekday numbers (1 = Monday)."""
    if d.isoweekday() not in operation_days:
        return False
    # Units open every day of the week are also open on holidays
    return set(operation_days) == ALL_WEEKDAYS or d not in holidays


@dataclass(frozen=True)
class OperationalDays:
    full_month: list[date]
    general_case: list[date]
    special_cases: Mapping[int, list[date]] = field(default_factory=dict)

    def for_unit(self, unit_id: int) -> list[date]:
        return self.special_cases.get(unit_id, self.general_case)


def build_operational_days(
    year: int,
    month: int,
    *,
    holidays: AbstractSet[date],
    unit_operation_days: Mapping[int, AbstractSet[int]],
) -> OperationalDays:
    days_of_month = list(FiniteDateRange.of_month(year, month).dates())

    general_case = [d for d in days_of_month if is_operational_date(d, MONDAY_TO_FRIDAY, holidays)]

    special_cases = {
        unit_id: [d for d in days_of_month if is_operational_date(d, set(days), holidays)]
        for unit_id, days in unit_operation_days.items()
        if set(days) != MONDAY_TO_FRIDAY
    }

    return OperationalDays(full_month=days_of_month, general_case=general_case, special_cases=special_cases)
