from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.evaka_service.evaka_service.absences.model import Absence, AbsenceDelete, AbsenceUpsert
from src.evaka_service.evaka_service.absences.service import AbsenceService
from src.evaka_service.evaka_service.core.constants import SYSTEM_USER_ID
from src.evaka_service.evaka_service.core.enums import AbsenceCategory, AbsenceType, Role
from src.evaka_service.evaka_service.core.exceptions import AuthorizationError, ConflictError, ValidationError
from src.evaka_service.evaka_service.shared.date_range import FiniteDateRange

NOW = datetime(2022, 3, 15, 9, 0)


class InMemoryAbsences:
    """Keyed by (child, date, category) like the unique key in the database."""

    def __init__(self):
        self.rows: dict[tuple, Absence] = {}
        self._id = 0

    def _write(self, *, now, user_id, a: AbsenceUpsert) -> int:
        key = (a.child_id, a.date, a.category)
        existing = self.rows.get(key)
        absence_id = existing.absence_id if existing else self._next_id()
        self.rows[key] = Absence(absence_id, a.child_id, a.date, a.category, a.absence_type, user_id, now)
        return absence_id

    def _next_id(self) -> int:
        self._id += 1
        return self._id

    def insert_absences(self, *, now, user_id, absences):
        if any((a.child_id, a.date, a.category) in self.rows for a in absences):
            raise ConflictError("Some of the absences already exist")
        for a in absences:
            self._write(now=now, user_id=user_id, a=a)

    def upsert_absences(self, *, now, user_id, absences):
        return [self._write(now=now, user_id=user_id, a=a) for a in absences]

    def upsert_generated_absences(self, *, now, absences):
        ids = []
        for a in absences:
            existing = self.rows.get((a.child_id, a.date, a.category))
            if existing is None or existing.modified_by == SYSTEM_USER_ID:
                ids.append(self._write(now=now, user_id=SYSTEM_USER_ID, a=a))
        return ids

    def batch_delete_absences(self, deletions):
        ids = []
        for d in deletions:
            removed = self.rows.pop((d.child_id, d.date, d.category), None)
            if removed:
                ids.append(removed.absence_id)
        return ids

    def get_absences_for_child(self, *, child_id, period):
        return sorted(
            (a for a in self.rows.values() if a.child_id == child_id and period.includes(a.date)),
            key=lambda a: a.date,
        )


def upsert(d: date, absence_type=AbsenceType.PLANNED_ABSENCE, category=AbsenceCategory.BILLABLE, child_id=1):
    return AbsenceUpsert(child_id=child_id, date=d, category=category, absence_type=absence_type)


def test_upsert_overwrites_existing_absence():
    repo = InMemoryAbsences()
    service = AbsenceService(repo)

    first = service.upsert_absences(current_role=Role.STAFF, user_id=5, absences=[upsert(date(2022, 3, 10))], now=NOW)
    second = service.upsert_absences(
        current_role=Role.STAFF,
        user_id=5,
        absences=[upsert(date(2022, 3, 10), AbsenceType.SICKLEAVE)],
        now=NOW,
    )

    assert first == second
    [absence] = service.get_child_absences(child_id=1, period=FiniteDateRange.of_day(date(2022, 3, 10)))
    assert absence.absence_type == AbsenceType.SICKLEAVE


def test_generated_absences_do_not_overwrite_employee_marked():
    repo = InMemoryAbsences()
    service = AbsenceService(repo)
    service.upsert_absences(current_role=Role.STAFF, user_id=5, absences=[upsert(date(2022, 3, 10))], now=NOW)

    ids = service.upsert_generated_absences(
        absences=[upsert(date(2022, 3, 10), AbsenceType.OTHER_ABSENCE), upsert(date(2022, 3, 11), AbsenceType.OTHER_ABSENCE)],
        now=NOW,
    )

    assert len(ids) == 1
    absences = service.get_child_absences(child_id=1, period=FiniteDateRange(date(2022, 3, 1), date(2022, 3, 31)))
    assert [(a.date, a.absence_type, a.modified_by) for a in absences] == [
        (date(2022, 3, 10), AbsenceType.PLANNED_ABSENCE, 5),
        (date(2022, 3, 11), AbsenceType.OTHER_ABSENCE, SYSTEM_USER_ID),
    ]


def test_future_sick_leave_is_rejected():
    service = AbsenceService(InMemoryAbsences())
    with pytest.raises(ValidationError):
        service.upsert_absences(
            current_role=Role.STAFF,
            user_id=5,
            absences=[upsert(date(2022, 3, 16), AbsenceType.SICKLEAVE)],
            now=NOW,
        )


def test_planned_absence_in_future_is_allowed():
    service = AbsenceService(InMemoryAbsences())
    ids = service.upsert_absences(
        current_role=Role.UNIT_SUPERVISOR, user_id=5, absences=[upsert(date(2022, 7, 1))], now=NOW
    )
    assert len(ids) == 1


def test_upsert_span_is_limited():
    service = AbsenceService(InMemoryAbsences())
    start = date(2021, 1, 1)
    with pytest.raises(ValidationError):
        service.upsert_absences(
            current_role=Role.STAFF,
            user_id=5,
            absences=[upsert(start), upsert(start + timedelta(days=366))],
            now=NOW,
        )


def test_empty_upsert_is_rejected():
    with pytest.raises(ValidationError):
        AbsenceService(InMemoryAbsences()).upsert_absences(current_role=Role.STAFF, user_id=5, absences=[], now=NOW)


def test_finance_admin_cannot_edit_absences():
    with pytest.raises(AuthorizationError):
        AbsenceService(InMemoryAbsences()).upsert_absences(
            current_role=Role.FINANCE_ADMIN, user_id=5, absences=[upsert(date(2022, 3, 1))], now=NOW
        )


def test_delete_absences_by_key():
    repo = InMemoryAbsences()
    service = AbsenceService(repo)
    service.upsert_absences(
        current_role=Role.STAFF,
        user_id=5,
        absences=[upsert(date(2022, 3, 10)), upsert(date(2022, 3, 10), category=AbsenceCategory.NONBILLABLE)],
        now=NOW,
    )

    deleted = service.delete_absences(
        current_role=Role.STAFF,
        deletions=[AbsenceDelete(child_id=1, date=date(2022, 3, 10), category=AbsenceCategory.BILLABLE)],
    )

    assert len(deleted) == 1
    [remaining] = service.get_child_absences(child_id=1, period=FiniteDateRange.of_day(date(2022, 3, 10)))
    assert remaining.category == AbsenceCategory.NONBILLABLE


def test_insert_refuses_already_marked_day():
    repo = InMemoryAbsences()
    service = AbsenceService(repo)
    service.insert_absences(current_role=Role.STAFF, user_id=5, absences=[upsert(date(2022, 3, 10))], now=NOW)

    with pytest.raises(ConflictError):
        service.insert_absences(
            current_role=Role.STAFF,
            user_id=5,
            absences=[upsert(date(2022, 3, 11)), upsert(date(2022, 3, 10), AbsenceType.SICKLEAVE)],
            now=NOW,
        )

    absences = service.get_child_absences(child_id=1, period=FiniteDateRange(date(2022, 3, 1), date(2022, 3, 31)))
    assert [(a.date, a.absence_type) for a in absences] == [(date(2022, 3, 10), AbsenceType.PLANNED_ABSENCE)]


def test_insert_allows_other_category_on_same_day():
    service = AbsenceService(InMemoryAbsences())
    service.insert_absences(
        current_role=Role.UNIT_SUPERVISOR,
        user_id=5,
        absences=[upsert(date(2022, 3, 10)), upsert(date(2022, 3, 10), category=AbsenceCategory.NONBILLABLE)],
        now=NOW,
    )

    assert len(service.get_child_absences(child_id=1, period=FiniteDateRange.of_day(date(2022, 3, 10)))) == 2
