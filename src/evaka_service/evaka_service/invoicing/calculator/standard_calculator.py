from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ...core.enums import IncomeEffect, PlacementType
from ..model import FeeDecisionChild, FeeThresholds
from .base import ChildPlacement, FamilyIncome, FeeCalculator

PLACEMENT_COEFFICIENTS: dict[PlacementType, Decimal] = {
    PlacementType.DAYCARE: Decimal("1.0"),
    PlacementType.DAYCARE_PART_TIME: Decimal("0.6"),
    PlacementType.PRESCHOOL_DAYCARE: Decimal("0.8"),
    PlacementType.PREPARATORY_DAYCARE: Decimal("0.8"),
}


def round_to_euros(cents: Decimal) -> int:
    euros = (cents / Decimal(100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(euros) * 100


class StandardFeeCalculator(FeeCalculator):
    """Standard rule: income above the family size threshold times the multiplier.

    Missing income, NOT_AVAILABLE or MAX_FEE_ACCEPTED of either adult means max fee.
    Children are ordered youngest first for sibling discounts.
    """

    def base_fee(
        self,
        *,
        thresholds: FeeThresholds,
        family_size: int,
        incomes: Sequence[Optional[FamilyIncome]],
    ) -> int:
        if any(i is None or i.effect != IncomeEffect.INCOME for i in incomes):
            return thresholds.max_fee

        total_income = sum(i.total_cents for i in incomes)
        over_threshold = max(0, total_income - thresholds.min_income_threshold_for(family_size))
        fee = round_to_euros(Decimal(over_threshold) * thresholds.income_multiplier)
        return min(max(fee, 0), thresholds.max_fee)

    def placement_coefficient(self, placement_type: PlacementType) -> Optional[Decimal]:
        return PLACEMENT_COEFFICIENTS.get(placement_type)

    def children_fees(
        self,
        *,
        thresholds: FeeThresholds,
        base_fee: int,
        children: Sequence[ChildPlacement],
    ) -> tuple[FeeDecisionChild, ...]:
        out: list[FeeDecisionChild] = []
        youngest_first = sorted(children, key=lambda c: (c.date_of_birth, c.child_id), reverse=True)
        for ordinal, child in enumerate(youngest_first, start=1):
            coefficient = self.placement_coefficient(child.placement_type)
            if coefficient is None:
                continue

            discount = thresholds.sibling_discount_multiplier(ordinal)
            fee = round_to_euros(Decimal(base_fee) * coefficient * (Decimal(1) - discount))
            if fee < thresholds.min_fee:
                fee = 0

            out.append(
                FeeDecisionChild(
                    child_id=child.child_id,
                    date_of_birth=child.date_of_birth,
                    unit_id=child.unit_id,
                    placement_type=child.placement_type,
                    base_fee=base_fee,
                    sibling_discount=int(discount * 100),
                    fee=fee,
                )
            )
        return tuple(out)
