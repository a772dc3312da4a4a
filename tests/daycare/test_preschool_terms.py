from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from src.evaka_service.evaka_service.core.constants import ALL_WEEKDAYS, MONDAY_TO_FRIDAY
from src.evaka_service.evaka_service.core.enums import Role, ScheduleType
from src.evaka_service.evaka_service.core.exceptions import AuthorizationError, ConflictError, ValidationError
from src.evaka_service.evaka_service.daycare.model import Daycare, PreschoolTerm
from src.evaka_service.evaka_service.daycare.service import DaycareService
from src.evaka_service.evaka_service.shared.date_range import FiniteDateRange
from src.evaka_service.evaka_service.shared.date_set import DateSet


def term_for(year: int) -> PreschoolTerm:
    return PreschoolTerm(
        finnish_preschool=FiniteDateRange(date(year, 8, 11), date(year + 1, 6, 2)),
        swedish_preschool=FiniteDateRange(date(year, 8, 13), date(year + 1, 6, 2)),
        extended_term=FiniteDateRange(date(year, 8, 1), date(year + 1, 6, 2)),
        application_period=FiniteDateRange(date(year - 1, 1, 8), date(year + 1, 6, 2)),
        term_breaks=DateSet.of(FiniteDateRange(date(year, 12, 21), date(year + 1, 1, 6))),
    )


class InMemoryDaycares:
    def __init__(self, daycares: list[Daycare]):
        self._daycares = daycares

    def list_daycares(self):
        return list(self._daycares)

    def get_by_id(self, daycare_id: int):
        return next((d for d in self._daycares if d.daycare_id == daycare_id), None)


class InMemoryHolidays:
    def __init__(self):
        self.holidays: dict[date, str | None] = {}

    def get_holidays(self, period: FiniteDateRange) -> set[date]:
        return {d for d in self.holidays if period.includes(d)}

    def upsert_holiday(self, *, holiday: date, description=None) -> None:
        self.holidays[holiday] = description


class InMemoryTerms:
    def __init__(self, terms: list[PreschoolTerm]):
        self.terms = terms

    def get_preschool_terms(self):
        return sorted(self.terms, key=lambda t: t.extended_term.start)

    def insert_preschool_term(self, term: PreschoolTerm) -> int:
        term_id = len(self.terms) + 1
        self.terms.append(replace(term, term_id=term_id))
        return term_id


def build_service(terms=None, daycares=None) -> DaycareService:
    return DaycareService(
        InMemoryDaycares(daycares or []),
        InMemoryHolidays(),
        InMemoryTerms(list(terms or [])),
    )


def test_schedule_type_inside_and_outside_preschool():
    term = term_for(2022)
    assert term.schedule_type(date(2022, 9, 1)) == ScheduleType.FIXED_SCHEDULE
    assert term.schedule_type(date(2022, 12, 27)) == ScheduleType.TERM_BREAK
    assert term.schedule_type(date(2022, 8, 5)) is None


def test_applications_accepted_until_end_of_extended_term():
    term = term_for(2022)
    assert term.is_application_accepted(date(2021, 1, 8))
    assert term.is_application_accepted(date(2023, 6, 2))
    assert not term.is_application_accepted(date(2021, 1, 7))


def test_active_term_is_found_by_extended_term():
    service = build_service([term_for(2021), term_for(2022)])
    assert service.get_active_preschool_term_at(date(2022, 8, 2)).extended_term == term_for(2022).extended_term
    assert service.get_active_preschool_term_at(date(2023, 7, 1)) is None


def test_insert_term_requires_admin():
    with pytest.raises(AuthorizationError):
        build_service().insert_preschool_term(current_role=Role.STAFF, term=term_for(2022))


def test_insert_overlapping_term_is_rejected():
    service = build_service([term_for(2022)])
    overlapping = replace(term_for(2023), extended_term=FiniteDateRange(date(2023, 5, 1), date(2024, 6, 2)))
    with pytest.raises(ConflictError):
        service.insert_preschool_term(current_role=Role.ADMIN, term=overlapping)


def test_term_breaks_must_be_inside_preschool():
    bad = replace(term_for(2022), term_breaks=DateSet.of(FiniteDateRange(date(2023, 6, 1), date(2023, 6, 10))))
    with pytest.raises(ValidationError):
        build_service().insert_preschool_term(current_role=Role.ADMIN, term=bad)


def test_insert_term_without_breaks():
    service = build_service([term_for(2021)])
    term_id = service.insert_preschool_term(current_role=Role.ADMIN, term=replace(term_for(2022), term_breaks=DateSet()))
    assert term_id == 2
    assert len(service.get_preschool_terms()) == 2


def test_operational_days_respect_added_holidays():
    daycares = [
        Daycare(1, "Kallio", 10, MONDAY_TO_FRIDAY),
        Daycare(2, "Round the clock", 10, ALL_WEEKDAYS),
    ]
    service = build_service(daycares=daycares)
    service.add_holiday(current_role=Role.ADMIN, holiday=date(2021, 12, 6), description="Independence day")

    days = service.operational_days(2021, 12)

    assert date(2021, 12, 6) not in days.general_case
    assert date(2021, 12, 6) in days.for_unit(2)
    assert len(days.for_unit(2)) == 31


def test_operational_days_validates_month():
    with pytest.raises(ValidationError):
        build_service().operational_days(2021, 13)


def test_only_admin_adds_holidays():
    with pytest.raises(AuthorizationError):
        build_service().add_holiday(current_role=Role.FINANCE_ADMIN, holiday=date(2021, 12, 6))
