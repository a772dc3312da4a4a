from datetime import date

from src.evaka_service.evaka_service.core.enums import FeeDecisionStatus, PlacementType
from src.evaka_service.evaka_service.invoicing.finance_decisions import (
    decision_contents_are_equal,
    update_end_dates_or_annul_conflicting_decisions,
)
from src.evaka_service.evaka_service.invoicing.model import FeeDecision, FeeDecisionChild

CHILD = FeeDecisionChild(
    child_id=2,
    date_of_birth=date(2019, 1, 1),
    unit_id=1,
    placement_type=PlacementType.DAYCARE,
    base_fee=28800,
    sibling_discount=0,
    fee=28800,
)


def decision(decision_id: str, start: date, end, *, head: int = 1, status=FeeDecisionStatus.SENT, children=(CHILD,)):
    return FeeDecision(
        id=decision_id,
        head_of_family_id=head,
        valid_from=start,
        valid_to=end,
        status=status,
        family_size=2,
        children=children,
    )


def test_conflict_starting_inside_new_decision_is_annulled():
    old = decision("old", date(2022, 6, 10), date(2022, 6, 20))
    new = decision("new", date(2022, 6, 10), None, status=FeeDecisionStatus.DRAFT)

    result = update_end_dates_or_annul_conflicting_decisions([new], [old])

    assert result == [old.annul()]
    assert result[0].valid_to == date(2022, 6, 20)


def test_conflict_starting_before_new_decision_is_ended():
    old = decision("old", date(2022, 1, 1), None)
    new = decision("new", date(2022, 6, 1), date(2022, 6, 30), status=FeeDecisionStatus.DRAFT)

    [updated] = update_end_dates_or_annul_conflicting_decisions([new], [old])

    assert updated.status == FeeDecisionStatus.SENT
    assert (updated.valid_from, updated.valid_to) == (date(2022, 1, 1), date(2022, 5, 31))


def test_annulled_keep_original_validity_and_come_last():
    first = decision("first", date(2022, 1, 1), date(2022, 3, 31))
    second = decision("second", date(2022, 4, 1), date(2022, 12, 31))
    drafts = [
        decision("late", date(2022, 3, 15), None, status=FeeDecisionStatus.DRAFT),
        decision("early", date(2022, 2, 1), date(2022, 2, 28), status=FeeDecisionStatus.DRAFT),
    ]

    result = update_end_dates_or_annul_conflicting_decisions(drafts, [first, second])

    assert [d.id for d in result] == ["first", "second"]
    assert result[0].valid_to == date(2022, 1, 31)
    assert result[1].is_annulled()
    assert (result[1].valid_from, result[1].valid_to) == (date(2022, 4, 1), date(2022, 12, 31))


def test_other_heads_of_family_are_not_touched():
    old = decision("old", date(2022, 1, 1), None, head=99)
    new = decision("new", date(2022, 1, 1), None, status=FeeDecisionStatus.DRAFT)

    assert update_end_dates_or_annul_conflicting_decisions([new], [old]) == [old]


def test_content_equality_ignores_validity_and_status():
    a = decision("a", date(2022, 1, 1), date(2022, 1, 31))
    b = decision("b", date(2022, 3, 1), None, status=FeeDecisionStatus.DRAFT)
    c = decision("c", date(2022, 1, 1), date(2022, 1, 31), children=())

    assert decision_contents_are_equal(a, b)
    assert not decision_contents_are_equal(a, c)
    assert c.is_empty()
