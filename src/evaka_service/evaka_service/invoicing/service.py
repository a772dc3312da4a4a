from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_positive_id, require_role
from ..core.constants import DEFAULT_DECISION_LOOKBACK_YEARS
from ..core.enums import FeeDecisionStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..shared.date_range import DateRange
from .finance_decisions import update_end_dates_or_annul_conflicting_decisions
from .generator import FinanceDecisionGenerator
from .model import FeeDecision
from .repository import FeeDecisionRepository

_LOGGER = logging.getLogger(__name__)

_FINANCE_ROLES = {Role.ADMIN, Role.FINANCE_ADMIN}


class FeeDecisionService:
    def __init__(self, fee_decisions: FeeDecisionRepository, generator: FinanceDecisionGenerator):
        self._fee_decisions = fee_decisions
        self._generator = generator

    def generate_drafts(
        self,
        *,
        current_role: Role,
        head_of_family_id: int,
        from_date: Optional[date] = None,
    ) -> list[FeeDecision]:
        require_role(current_role, _FINANCE_ROLES)
        if from_date is None:
            today = now_local().date()
            from_date = date(today.year - DEFAULT_DECISION_LOOKBACK_YEARS, today.month, 1)
        head_of_family_id = require_positive_id(head_of_family_id, "head_of_family_id")
        return self._generator.generate_new_decisions_for_adult(head_of_family_id=head_of_family_id, from_date=from_date)

    def get_decision(self, *, current_role: Role, decision_id: str) -> FeeDecision:
        require_role(current_role, _FINANCE_ROLES)
        found = self._fee_decisions.get_by_ids([decision_id])
        if not found:
            raise NotFoundError(f"No fee decision found with id {decision_id}")
        return found[0]

    def list_for_head_of_family(
        self,
        *,
        current_role: Role,
        head_of_family_id: int,
        statuses: Optional[Sequence[FeeDecisionStatus]] = None,
    ) -> list[FeeDecision]:
        require_role(current_role, _FINANCE_ROLES)
        decisions = self._fee_decisions.find_for_head_of_family(
            head_of_family_id=require_positive_id(head_of_family_id, "head_of_family_id"),
            statuses=statuses,
        )
        return sorted(decisions, key=lambda d: d.valid_from)

    def confirm_drafts(
        self,
        *,
        current_role: Role,
        decision_ids: Sequence[str],
        now: datetime | None = None,
    ) -> list[FeeDecision]:
        """Send the given drafts, ending or annulling the sent decisions they replace.

        Returns the decisions that changed: replaced ones first, then the sent drafts.
        """

        require_role(current_role, _FINANCE_ROLES)
        if not decision_ids:
            raise ValidationError("No decisions given")
        now = now or now_local()

        drafts = list(self._fee_decisions.get_by_ids(decision_ids))
        if len(drafts) != len(set(decision_ids)):
            raise NotFoundError("Some of the fee decisions were not found")
        if any(d.status != FeeDecisionStatus.DRAFT for d in drafts):
            raise ValidationError("Only draft decisions can be confirmed")

        by_head: dict[int, list[FeeDecision]] = defaultdict(list)
        for d in drafts:
            by_head[d.head_of_family_id].append(d)

        changed: list[FeeDecision] = []
        to_send: list[FeeDecision] = []
        for head_of_family_id, head_drafts in by_head.items():
            earliest = min(d.valid_from for d in head_drafts)
            conflicting = self._fee_decisions.find_for_head_of_family(
                head_of_family_id=head_of_family_id,
                period=DateRange(earliest, None),
                statuses=[FeeDecisionStatus.SENT],
            )
            updated = update_end_dates_or_annul_conflicting_decisions(head_drafts, conflicting)
            originals = {c.id: c for c in conflicting}
            changed += [u for u in updated if u != originals.get(u.id)]
            to_send += [d for d in head_drafts if not d.is_empty()]

        empty_ids = [d.id for d in drafts if d.is_empty()]

        self._fee_decisions.apply_confirmation(
            updated=changed,
            deleted_ids=empty_ids,
            sent_ids=[d.id for d in to_send],
            sent_at=now,
        )

        _LOGGER.info(
            "Confirmed %d fee decisions (%d empty drafts dropped, %d sent decisions updated)",
            len(to_send),
            len(empty_ids),
            len(changed),
        )
        sent = self._fee_decisions.get_by_ids([d.id for d in to_send]) if to_send else []
        return changed + list(sent)
