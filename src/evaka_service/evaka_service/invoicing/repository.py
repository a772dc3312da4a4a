from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import FeeDecisionStatus
from ..shared.date_range import DateRange
from .model import FeeDecision, FeeThresholds


class FeeDecisionRepository(Protocol):
    def get_by_ids(self, decision_ids: Iterable[str]) -> Sequence[FeeDecision]:
        raise NotImplementedError

    def find_for_head_of_family(
        self,
        *,
        head_of_family_id: int,
        period: Optional[DateRange] = None,
        statuses: Optional[Iterable[FeeDecisionStatus]] = None,
    ) -> Sequence[FeeDecision]:
        raise NotImplementedError

    def find_overlapping(self, *, period: DateRange, statuses: Iterable[FeeDecisionStatus]) -> Sequence[FeeDecision]:
        raise NotImplementedError

    def replace_drafts(self, *, head_of_family_id: int, drafts: Sequence[FeeDecision]) -> int:
        """Delete the head's old drafts and store the new ones in one transaction.

        Returns the number of deleted drafts.
        """

        raise NotImplementedError

    def apply_confirmation(
        self,
        *,
        updated: Sequence[FeeDecision],
        deleted_ids: Sequence[str],
        sent_ids: Sequence[str],
        sent_at: datetime,
    ) -> None:
        """Store the ended or annulled decisions, drop `deleted_ids` and send `sent_ids`.

        Everything happens in one transaction. Sent decisions get the next
        free decision numbers.
        """

        raise NotImplementedError


class FeeThresholdsRepository(Protocol):
    def get_fee_thresholds(self, *, period: Optional[DateRange] = None) -> Sequence[FeeThresholds]:
        raise NotImplementedError
