from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence, TypeVar

from ..shared.date_range import ONE_DAY, DateRange

Decision = TypeVar("Decision", bound="FinanceDecision")


class FinanceDecision(Protocol):
    id: str
    valid_from: date
    valid_to: Optional[date]
    head_of_family_id: int

    def with_random_id(self: Decision) -> Decision:
        ...

    def with_validity(self: Decision, period: DateRange) -> Decision:
        ...

    def content_equals(self: Decision, other: Decision) -> bool:
        ...

    def is_annulled(self) -> bool:
        ...

    def is_empty(self) -> bool:
        ...

    def annul(self: Decision) -> Decision:
        ...


def decision_contents_are_equal(decision1: Decision, decision2: Decision) -> bool:
    return decision1.content_equals(decision2)


def update_end_dates_or_annul_conflicting_decisions(
    new_decisions: Sequence[Decision],
    conflicting: Sequence[Decision],
) -> list[Decision]:
    """Shorten or annul the existing decisions that the new decisions replace.

    A conflict that starts on or after the start of a new decision is annulled,
    one that starts before it ends the day before. Annulled decisions are
    returned with their original validity.
    """

    fixed = list(conflicting)
    for new in sorted(new_decisions, key=lambda d: d.valid_from):
        new_range = DateRange(new.valid_from, new.valid_to)
        updated = []
        for conflict in fixed:
            if conflict.head_of_family_id == new.head_of_family_id and DateRange(
                conflict.valid_from, conflict.valid_to
            ).overlaps(new_range):
                if new.valid_from <= conflict.valid_from:
                    conflict = conflict.annul()
                else:
                    conflict = conflict.with_validity(
                        DateRange(conflict.valid_from, conflict.valid_to).with_end(new.valid_from - ONE_DAY)
                    )
            updated.append(conflict)
        fixed = updated

    annulled_ids = {d.id for d in fixed if d.is_annulled()}
    non_annulled = [d for d in fixed if not d.is_annulled()]
    originals_annulled = [d.annul() for d in conflicting if d.id in annulled_ids]
    return non_annulled + originals_annulled
