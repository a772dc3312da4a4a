from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import FeeDecisionStatus, PlacementType
from ..shared.date_range import DateRange


@dataclass(frozen=True)
class FeeDecisionChild:
    child_id: int
    date_of_birth: date
    unit_id: int
    placement_type: PlacementType
    base_fee: int
    sibling_discount: int
    fee: int


@dataclass(frozen=True)
class FeeDecision:
    """Fee decision of one head of family. Amounts are in cents."""

    id: str
    head_of_family_id: int
    valid_from: date
    valid_to: Optional[date]
    status: FeeDecisionStatus = FeeDecisionStatus.DRAFT
    partner_id: Optional[int] = None
    family_size: int = 1
    children: tuple[FeeDecisionChild, ...] = ()
    decision_number: Optional[int] = None
    sent_at: Optional[datetime] = None

    @classmethod
    def draft(
        cls,
        *,
        head_of_family_id: int,
        valid_during: DateRange,
        partner_id: Optional[int] = None,
        family_size: int = 1,
        children: tuple[FeeDecisionChild, ...] = (),
    ) -> "FeeDecision":
        return cls(
            id=str(uuid.uuid4()),
            head_of_family_id=head_of_family_id,
            valid_from=valid_during.start,
            valid_to=valid_during.end,
            partner_id=partner_id,
            family_size=family_size,
            children=children,
        )

    @property
    def valid_during(self) -> DateRange:
        return DateRange(self.valid_from, self.valid_to)

    @property
    def total_fee(self) -> int:
        return sum(c.fee for c in self.children)

    def with_random_id(self) -> "FeeDecision":
        return replace(self, id=str(uuid.uuid4()))

    def with_validity(self, period: DateRange) -> "FeeDecision":
        return replace(self, valid_from=period.start, valid_to=period.end)

    def content_equals(self, other: "FeeDecision") -> bool:
        return (
            self.head_of_family_id == other.head_of_family_id
            and self.partner_id == other.partner_id
            and self.family_size == other.family_size
            and set(self.children) == set(other.children)
        )

    def is_annulled(self) -> bool:
        return self.status == FeeDecisionStatus.ANNULLED

    def is_empty(self) -> bool:
        return not self.children

    def annul(self) -> "FeeDecision":
        return replace(self, status=FeeDecisionStatus.ANNULLED)


@dataclass(frozen=True)
class FeeThresholds:
    """Income based fee parameters. Money in cents, coefficients as decimals."""

    valid_during: DateRange
    min_income_threshold: dict[int, int]
    income_threshold_increase_6_plus: int
    income_multiplier: Decimal
    max_fee: int
    min_fee: int
    sibling_discount_2: Decimal
    sibling_discount_2_plus: Decimal
    thresholds_id: Optional[int] = field(default=None, compare=False)

    def min_income_threshold_for(self, family_size: int) -> int:
        if family_size < 2:
            return self.min_income_threshold[2]
        if family_size <= 6:
            return self.min_income_threshold[family_size]
        return self.min_income_threshold[6] + (family_size - 6) * self.income_threshold_increase_6_plus

    def sibling_discount_multiplier(self, sibling_ordinal: int) -> Decimal:
        """`sibling_ordinal` is 1 for the youngest child."""

        if sibling_ordinal <= 1:
            return Decimal("0")
        if sibling_ordinal == 2:
            return self.sibling_discount_2
        return self.sibling_discount_2_plus
