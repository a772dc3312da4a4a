from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest

from src.evaka_service.evaka_service.core.enums import FeeDecisionStatus, IncomeEffect, PlacementType, Role
from src.evaka_service.evaka_service.core.exceptions import AuthorizationError, ValidationError
from src.evaka_service.evaka_service.invoicing.generator import FinanceDecisionGenerator
from src.evaka_service.evaka_service.invoicing.model import FeeDecision, FeeThresholds
from src.evaka_service.evaka_service.invoicing import service as fee_decision_service_module
from src.evaka_service.evaka_service.invoicing.service import FeeDecisionService
from src.evaka_service.evaka_service.persons.model import Income, Parentship, Partnership, Person
from src.evaka_service.evaka_service.placements.model import Placement
from src.evaka_service.evaka_service.shared.date_range import DateRange

HEAD_ID = 1
PARTNER_ID = 2
CHILD_ID = 10
NOW = datetime(2023, 1, 1, 0, 0)

THRESHOLDS = FeeThresholds(
    valid_during=DateRange(date(2000, 1, 1)),
    min_income_threshold={2: 213000, 3: 274700, 4: 311200, 5: 347900, 6: 384600},
    income_threshold_increase_6_plus=14200,
    income_multiplier=Decimal("0.107"),
    max_fee=28800,
    min_fee=2700,
    sibling_discount_2=Decimal("0.4"),
    sibling_discount_2_plus=Decimal("0.8"),
    thresholds_id=1,
)


def day(d: int) -> date:
    return date(2022, 6, d)


def date_range(start: int, end: int) -> DateRange:
    return DateRange(day(start), day(end))


class InMemoryPersons:
    def __init__(self, persons: list[Person]):
        self._persons = {p.person_id: p for p in persons}

    def get_by_id(self, person_id: int) -> Optional[Person]:
        return self._persons.get(person_id)

    def get_by_ids(self, person_ids) -> dict[int, Person]:
        return {i: self._persons[i] for i in person_ids if i in self._persons}


class InMemoryFamilies:
    def __init__(self, parentships: list[Parentship], partnerships: Optional[list[Partnership]] = None):
        self.parentships = parentships
        self.partnerships = partnerships or []

    def get_parentships_for_head(self, *, head_of_family_id: int):
        return [p for p in self.parentships if p.head_of_family_id == head_of_family_id]

    def get_partnerships_for_person(self, *, person_id: int):
        return [p for p in self.partnerships if person_id in (p.person_id, p.partner_id)]


class InMemoryPlacements:
    def __init__(self, placements: list[Placement]):
        self.placements = placements

    def get_placements_for_children(self, *, child_ids, types=None):
        child_ids = set(child_ids)
        return [p for p in self.placements if p.child_id in child_ids]


class InMemoryIncomes:
    def __init__(self, incomes: Optional[list[Income]] = None):
        self.incomes = incomes or []

    def get_incomes_for_persons(self, person_ids):
        person_ids = set(person_ids)
        return [i for i in self.incomes if i.person_id in person_ids]


class InMemoryThresholds:
    def __init__(self, thresholds: list[FeeThresholds]):
        self._thresholds = thresholds

    def get_fee_thresholds(self, *, period=None):
        return [t for t in self._thresholds if period is None or t.valid_during.overlaps(period)]


class InMemoryFeeDecisions:
    def __init__(self):
        self.decisions: dict[str, FeeDecision] = {}
        self._last_number = 0

    def get_by_ids(self, decision_ids):
        return [self.decisions[i] for i in decision_ids if i in self.decisions]

    def find_for_head_of_family(self, *, head_of_family_id, period=None, statuses=None):
        return [
            d
            for d in self.decisions.values()
            if d.head_of_family_id == head_of_family_id
            and (period is None or d.valid_during.overlaps(period))
            and (statuses is None or d.status in set(statuses))
        ]

    def find_overlapping(self, *, period, statuses):
        return [d for d in self.decisions.values() if d.valid_during.overlaps(period) and d.status in set(statuses)]

    @contextmanager
    def _transaction(self):
        saved = (dict(self.decisions), self._last_number)
        try:
            yield
        except Exception:
            self.decisions, self._last_number = saved
            raise

    def _upsert(self, decisions):
        for d in decisions:
            self.decisions[d.id] = d

    def _mark_sent(self, decision_ids, sent_at):
        for i in decision_ids:
            self._last_number += 1
            self.decisions[i] = replace(
                self.decisions[i], status=FeeDecisionStatus.SENT, sent_at=sent_at, decision_number=self._last_number
            )

    def replace_drafts(self, *, head_of_family_id, drafts):
        with self._transaction():
            ids = [
                d.id
                for d in self.decisions.values()
                if d.head_of_family_id == head_of_family_id and d.status == FeeDecisionStatus.DRAFT
            ]
            for i in ids:
                del self.decisions[i]
            self._upsert(drafts)
            return len(ids)

    def apply_confirmation(self, *, updated, deleted_ids, sent_ids, sent_at):
        with self._transaction():
            self._upsert(updated)
            for i in deleted_ids:
                self.decisions.pop(i, None)
            self._mark_sent(sent_ids, sent_at)

    def all_sorted(self) -> list[FeeDecision]:
        return sorted(self.decisions.values(), key=lambda d: (d.valid_from, d.status.value))


class Fixture:
    def __init__(self, *, partnerships=None, incomes=None, thresholds=None):
        self.placements = InMemoryPlacements(
            [Placement(1, CHILD_ID, 100, PlacementType.DAYCARE, day(10), day(20))]
        )
        self.families = InMemoryFamilies(
            [Parentship(HEAD_ID, CHILD_ID, date(2021, 6, 10), date(2023, 6, 20))], partnerships
        )
        self.fee_decisions = InMemoryFeeDecisions()
        persons = InMemoryPersons(
            [
                Person(HEAD_ID, "Anna", "Aikuinen", date(1985, 1, 1)),
                Person(PARTNER_ID, "Pekka", "Aikuinen", date(1984, 1, 1)),
                Person(CHILD_ID, "Kalle", "Aikuinen", date(2019, 3, 1)),
            ]
        )
        self.generator = FinanceDecisionGenerator(
            persons,
            self.families,
            self.placements,
            InMemoryIncomes(incomes),
            self.fee_decisions,
            InMemoryThresholds(thresholds if thresholds is not None else [THRESHOLDS]),
        )
        self.service = FeeDecisionService(self.fee_decisions, self.generator)

    def generate(self) -> list[FeeDecision]:
        return self.service.generate_drafts(
            current_role=Role.FINANCE_ADMIN, head_of_family_id=HEAD_ID, from_date=date(2017, 6, 10)
        )

    def send_all(self) -> list[FeeDecision]:
        draft_ids = [d.id for d in self.fee_decisions.decisions.values() if d.status == FeeDecisionStatus.DRAFT]
        return self.service.confirm_drafts(current_role=Role.FINANCE_ADMIN, decision_ids=draft_ids, now=NOW)

    def set_placements(self, *ranges: tuple[int, int]) -> None:
        self.placements.placements = [
            Placement(i, CHILD_ID, 100, PlacementType.DAYCARE, day(start), day(end))
            for i, (start, end) in enumerate(ranges, start=1)
        ]

    def summary(self, status: Optional[FeeDecisionStatus] = None) -> list[tuple]:
        return [
            (d.status, d.valid_during, len(d.children))
            for d in self.fee_decisions.all_sorted()
            if status is None or d.status == status
        ]


@pytest.fixture
def fixture() -> Fixture:
    f = Fixture()
    f.generate()
    f.send_all()
    assert f.summary() == [(FeeDecisionStatus.SENT, date_range(10, 20), 1)]
    return f


SENT = FeeDecisionStatus.SENT
ANNULLED = FeeDecisionStatus.ANNULLED


@pytest.mark.parametrize(
    "placements, expected_drafts, expected_final",
    [
        (
            [(5, 20)],
            [(date_range(5, 9), 1)],
            [(SENT, date_range(5, 9), 1), (SENT, date_range(10, 20), 1)],
        ),
        (
            [(15, 20)],
            [(date_range(10, 14), 0), (date_range(15, 20), 1)],
            [(ANNULLED, date_range(10, 20), 1), (SENT, date_range(15, 20), 1)],
        ),
        (
            [(10, 15)],
            [(date_range(16, 20), 0)],
            [(SENT, date_range(10, 15), 1)],
        ),
        (
            [(10, 25)],
            [(date_range(21, 25), 1)],
            [(SENT, date_range(10, 20), 1), (SENT, date_range(21, 25), 1)],
        ),
        (
            [(5, 15)],
            [(date_range(5, 9), 1), (date_range(16, 20), 0)],
            [(SENT, date_range(5, 9), 1), (SENT, date_range(10, 15), 1)],
        ),
        (
            [(5, 25)],
            [(date_range(5, 9), 1), (date_range(21, 25), 1)],
            [(SENT, date_range(5, 9), 1), (SENT, date_range(10, 20), 1), (SENT, date_range(21, 25), 1)],
        ),
        (
            [(15, 15)],
            [(date_range(10, 14), 0), (date_range(15, 15), 1), (date_range(16, 20), 0)],
            [(ANNULLED, date_range(10, 20), 1), (SENT, date_range(15, 15), 1)],
        ),
        (
            [(15, 25)],
            [(date_range(10, 14), 0), (date_range(15, 25), 1)],
            [(ANNULLED, date_range(10, 20), 1), (SENT, date_range(15, 25), 1)],
        ),
        (
            [(10, 13), (16, 20)],
            [(date_range(14, 15), 0), (date_range(16, 20), 1)],
            [(SENT, date_range(10, 13), 1), (SENT, date_range(16, 20), 1)],
        ),
    ],
    ids=[
        "start-earlier",
        "start-later",
        "end-earlier",
        "end-later",
        "start-earlier-end-earlier",
        "start-earlier-end-later",
        "start-later-end-earlier",
        "start-later-end-later",
        "break-in-placement",
    ],
)
def test_placement_changes(fixture, placements, expected_drafts, expected_final):
    sent_before = fixture.summary(SENT)
    fixture.set_placements(*placements)

    drafts = fixture.generate()

    assert sorted(((d.valid_during, len(d.children)) for d in drafts), key=lambda x: x[0].start) == sorted(
        expected_drafts, key=lambda x: x[0].start
    )
    assert fixture.summary(SENT) == sent_before

    fixture.send_all()

    assert sorted(fixture.summary(), key=lambda x: (x[1].start, x[0].value)) == sorted(
        expected_final, key=lambda x: (x[1].start, x[0].value)
    )


def test_no_changes_produce_no_drafts(fixture):
    before = fixture.fee_decisions.all_sorted()

    assert fixture.generate() == []
    assert fixture.fee_decisions.all_sorted() == before


def test_sent_decisions_get_running_numbers(fixture):
    fixture.set_placements((5, 25))
    fixture.generate()
    fixture.send_all()

    numbers = sorted(d.decision_number for d in fixture.fee_decisions.all_sorted())
    assert numbers == [1, 2, 3]
    assert all(d.sent_at == NOW for d in fixture.fee_decisions.all_sorted())


def test_regenerating_replaces_old_drafts(fixture):
    fixture.set_placements((5, 20))
    fixture.generate()
    fixture.set_placements((10, 25))
    fixture.generate()

    drafts = [d for d in fixture.fee_decisions.all_sorted() if d.status == FeeDecisionStatus.DRAFT]
    assert [(d.valid_during, len(d.children)) for d in drafts] == [(date_range(21, 25), 1)]


def test_partner_and_income_change_decision_content():
    f = Fixture(
        partnerships=[Partnership(1, HEAD_ID, PARTNER_ID, day(15), None)],
        incomes=[
            Income(HEAD_ID, date(2022, 1, 1), None, IncomeEffect.INCOME, 300000),
            Income(PARTNER_ID, date(2022, 1, 1), None, IncomeEffect.INCOME, 200000),
        ],
    )

    drafts = sorted(f.generate(), key=lambda d: d.valid_from)

    assert [(d.valid_during, d.partner_id, d.family_size) for d in drafts] == [
        (date_range(10, 14), None, 2),
        (date_range(15, 20), PARTNER_ID, 3),
    ]
    # (300000 - 213000) * 0.107 = 9309 cents, rounds to 93 euros
    assert drafts[0].total_fee == 9300
    # With the partner both incomes count: (500000 - 274700) * 0.107
    assert drafts[1].total_fee == 24100


def test_missing_thresholds_raise_validation_error():
    f = Fixture(thresholds=[])
    with pytest.raises(ValidationError):
        f.generate()


def test_only_finance_roles_may_generate():
    f = Fixture()
    with pytest.raises(AuthorizationError):
        f.service.generate_drafts(current_role=Role.STAFF, head_of_family_id=HEAD_ID, from_date=day(1))


def test_confirming_sent_decision_is_rejected(fixture):
    sent = fixture.fee_decisions.all_sorted()[0]
    with pytest.raises(ValidationError):
        fixture.service.confirm_drafts(current_role=Role.ADMIN, decision_ids=[sent.id], now=NOW)


def test_generation_defaults_to_five_years_back(monkeypatch):
    monkeypatch.setattr(fee_decision_service_module, "now_local", lambda: datetime(2022, 6, 15, 12, 0))
    f = Fixture()

    drafts = f.service.generate_drafts(current_role=Role.ADMIN, head_of_family_id=HEAD_ID)

    assert [(d.valid_during, len(d.children)) for d in drafts] == [(date_range(10, 20), 1)]


def test_failed_confirmation_leaves_sent_decision_in_place(fixture, monkeypatch):
    fixture.set_placements((15, 20))
    fixture.generate()
    before = fixture.fee_decisions.all_sorted()

    def fail(decision_ids, sent_at):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(fixture.fee_decisions, "_mark_sent", fail)
    with pytest.raises(RuntimeError):
        fixture.send_all()

    assert fixture.fee_decisions.all_sorted() == before
    assert fixture.summary(SENT) == [(SENT, date_range(10, 20), 1)]


def test_free_placement_needs_no_thresholds():
    f = Fixture(thresholds=[])
    f.placements.placements = [Placement(1, CHILD_ID, 100, PlacementType.PRESCHOOL, day(10), day(20))]

    assert f.generate() == []
    assert f.fee_decisions.all_sorted() == []
