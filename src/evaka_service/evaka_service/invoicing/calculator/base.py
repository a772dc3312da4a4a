from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ...core.enums import IncomeEffect, PlacementType
from ..model import FeeDecisionChild, FeeThresholds


@dataclass(frozen=True)
class FamilyIncome:
    """Effective income of the head of family or partner during a period."""

    effect: IncomeEffect
    total_cents: int = 0


@dataclass(frozen=True)
class ChildPlacement:
    child_id: int
    date_of_birth: date
    unit_id: int
    placement_type: PlacementType


class FeeCalculator(ABC):
    """Calculator interface (Strategy Pattern for fees)."""

    @abstractmethod
    def base_fee(
        self,
        *,
        thresholds: FeeThresholds,
        family_size: int,
        incomes: Sequence[Optional[FamilyIncome]],
    ) -> int:
        raise NotImplementedError

    @abstractmethod
    def placement_coefficient(self, placement_type: PlacementType) -> Optional[Decimal]:
        """None means the placement is free and stays off the decision."""

        raise NotImplementedError

    @abstractmethod
    def children_fees(
        self,
        *,
        thresholds: FeeThresholds,
        base_fee: int,
        children: Sequence[ChildPlacement],
    ) -> tuple[FeeDecisionChild, ...]:
        raise NotImplementedError
