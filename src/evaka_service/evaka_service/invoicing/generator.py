"""Fee decision generation.

The family's situation (children, placements, partner, incomes, fee
thresholds) is cut into periods during which nothing changes. Each period
gets a computed decision. The computed decisions are then compared with
the decisions already sent, and only the differing parts become drafts.

An empty decision (no children with a fee) is only ever drafted to end or
annul a sent decision; it is deleted on confirmation.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import FeeDecisionStatus, IncomeEffect
from ..core.exceptions import NotFoundError, ValidationError
from ..persons.model import Income
from ..persons.repository import FamilyRepository, IncomeRepository, PersonRepository
from ..placements.model import Placement
from ..placements.repository import PlacementRepository
from ..shared.date_range import ONE_DAY, DateRange
from .calculator.base import ChildPlacement, FamilyIncome, FeeCalculator
from .calculator.standard_calculator import StandardFeeCalculator
from .model import FeeDecision
from .repository import FeeDecisionRepository, FeeThresholdsRepository

_LOGGER = logging.getLogger(__name__)


def build_periods(from_date: date, ranges: Iterable[DateRange]) -> list[DateRange]:
    """Split [from_date, ...) at every start and end of the given ranges."""

    boundaries = {from_date}
    for r in ranges:
        boundaries.add(r.start)
        if r.end is not None:
            boundaries.add(r.end + ONE_DAY)

    points = sorted(b for b in boundaries if b >= from_date)
    periods = [DateRange(start, nxt - ONE_DAY) for start, nxt in zip(points, points[1:])]
    periods.append(DateRange(points[-1], None))
    return periods


def merge_adjacent(decisions: Sequence[FeeDecision]) -> list[FeeDecision]:
    """Join decisions that follow each other directly and have equal content."""

    out: list[FeeDecision] = []
    for d in sorted(decisions, key=lambda x: x.valid_from):
        prev = out[-1] if out else None
        if (
            prev is not None
            and prev.valid_to is not None
            and prev.valid_to + ONE_DAY == d.valid_from
            and prev.content_equals(d)
        ):
            out[-1] = prev.with_validity(prev.valid_during.with_end(d.valid_to))
        else:
            out.append(d)
    return out


def _split_at(decision: FeeDecision, cut_points: Iterable[date]) -> list[FeeDecision]:
    cuts = sorted(c for c in set(cut_points) if decision.valid_during.includes(c) and c > decision.valid_from)
    pieces: list[FeeDecision] = []
    start = decision.valid_from
    for c in cuts:
        pieces.append(decision.with_validity(DateRange(start, c - ONE_DAY)))
        start = c
    pieces.append(decision.with_validity(DateRange(start, decision.valid_to)))
    return pieces


def drafts_against_sent(computed: Sequence[FeeDecision], sent: Sequence[FeeDecision]) -> list[FeeDecision]:
    """Pick the parts of `computed` that differ from the already sent decisions."""

    candidates: list[FeeDecision] = []
    for d in computed:
        if not d.is_empty():
            candidates.append(d)
            continue
        for s in sent:
            common = d.valid_during.intersection(s.valid_during)
            if common is not None:
                candidates.append(d.with_validity(common))

    cut_points = [s.valid_from for s in sent] + [s.valid_to + ONE_DAY for s in sent if s.valid_to is not None]
    segments = [piece for d in candidates for piece in _split_at(d, cut_points)]

    def containing(segment: FeeDecision) -> Optional[FeeDecision]:
        return next((s for s in sent if s.valid_during.contains(segment.valid_during)), None)

    changed = []
    for seg in segments:
        s = containing(seg)
        changed.append(s is None or not s.content_equals(seg))

    # Confirming a draft ends or annuls the sent decision it overlaps,
    # so everything after the first change inside a sent decision is re-decided.
    for s in sent:
        inside = [i for i, seg in enumerate(segments) if containing(seg) is s]
        first_change = min((segments[i].valid_from for i in inside if changed[i]), default=None)
        if first_change is None:
            continue
        for i in inside:
            if segments[i].valid_from >= first_change:
                changed[i] = True

    drafts = [seg for seg, is_changed in zip(segments, changed) if is_changed]
    return [d.with_random_id() for d in merge_adjacent(drafts)]


def _active_income(incomes: Sequence[Income], person_id: int, d: date) -> Optional[FamilyIncome]:
    matching = [i for i in incomes if i.person_id == person_id and i.period.includes(d)]
    if not matching:
        return None
    latest = max(matching, key=lambda i: i.valid_from)
    return FamilyIncome(effect=latest.effect, total_cents=latest.total_cents if latest.effect == IncomeEffect.INCOME else 0)


class FinanceDecisionGenerator:
    def __init__(
        self,
        persons: PersonRepository,
        families: FamilyRepository,
        placements: PlacementRepository,
        incomes: IncomeRepository,
        fee_decisions: FeeDecisionRepository,
        fee_thresholds: FeeThresholdsRepository,
        *,
        calculator: Optional[FeeCalculator] = None,
    ):
        self._persons = persons
        self._families = families
        self._placements = placements
        self._incomes = incomes
        self._fee_decisions = fee_decisions
        self._fee_thresholds = fee_thresholds
        self._calculator = calculator or StandardFeeCalculator()

    def generate_new_decisions_for_adult(self, *, head_of_family_id: int, from_date: date) -> list[FeeDecision]:
        head_of_family_id = int(head_of_family_id)

        parentships = self._families.get_parentships_for_head(head_of_family_id=head_of_family_id)
        partnerships = self._families.get_partnerships_for_person(person_id=head_of_family_id)
        child_ids = {p.child_id for p in parentships}
        placements = self._placements.get_placements_for_children(child_ids=child_ids) if child_ids else []
        partner_ids = {p.partner_of(head_of_family_id) for p in partnerships}
        incomes = self._incomes.get_incomes_for_persons({head_of_family_id} | partner_ids)
        thresholds = self._fee_thresholds.get_fee_thresholds(period=DateRange(from_date, None))
        children = self._persons.get_by_ids(child_ids) if child_ids else {}

        missing = child_ids - set(children)
        if missing:
            raise NotFoundError(f"Children not found: {sorted(missing)}")

        periods = build_periods(
            from_date,
            [p.period for p in parentships]
            + [p.period for p in partnerships]
            + [p.period.as_date_range() for p in placements]
            + [i.period for i in incomes]
            + [t.valid_during for t in thresholds],
        )

        computed = []
        for period in periods:
            d = period.start
            family_children = [p.child_id for p in parentships if p.period.includes(d)]
            partner = next((p.partner_of(head_of_family_id) for p in partnerships if p.period.includes(d)), None)
            child_placements = self._child_placements(family_children, placements, children, d)

            fee_bearing = [
                c for c in child_placements if self._calculator.placement_coefficient(c.placement_type) is not None
            ]
            if not fee_bearing:
                computed.append(FeeDecision.draft(head_of_family_id=head_of_family_id, valid_during=period))
                continue

            active_thresholds = next((t for t in thresholds if t.valid_during.includes(d)), None)
            if active_thresholds is None:
                raise ValidationError(f"No fee thresholds for {d.isoformat()}")

            family_size = 1 + (1 if partner is not None else 0) + len(family_children)
            adult_ids = [head_of_family_id] + ([partner] if partner is not None else [])
            base_fee = self._calculator.base_fee(
                thresholds=active_thresholds,
                family_size=family_size,
                incomes=[_active_income(incomes, a, d) for a in adult_ids],
            )
            fee_children = self._calculator.children_fees(
                thresholds=active_thresholds, base_fee=base_fee, children=child_placements
            )
            if not fee_children:
                computed.append(FeeDecision.draft(head_of_family_id=head_of_family_id, valid_during=period))
                continue

            computed.append(
                FeeDecision.draft(
                    head_of_family_id=head_of_family_id,
                    valid_during=period,
                    partner_id=partner,
                    family_size=family_size,
                    children=fee_children,
                )
            )

        sent = self._fee_decisions.find_for_head_of_family(
            head_of_family_id=head_of_family_id,
            period=DateRange(from_date, None),
            statuses=[FeeDecisionStatus.SENT],
        )
        drafts = drafts_against_sent(merge_adjacent(computed), sent)

        deleted = self._fee_decisions.replace_drafts(head_of_family_id=head_of_family_id, drafts=drafts)
        _LOGGER.info(
            "Generated %d fee decision drafts for head of family %s (replaced %d old drafts)",
            len(drafts),
            head_of_family_id,
            deleted,
        )
        return drafts

    @staticmethod
    def _child_placements(
        child_ids: Sequence[int],
        placements: Sequence[Placement],
        persons: dict,
        d: date,
    ) -> list[ChildPlacement]:
        out = []
        for child_id in child_ids:
            placement = next(
                (p for p in sorted(placements, key=lambda p: p.start_date) if p.child_id == child_id and p.period.includes(d)),
                None,
            )
            if placement is None:
                continue
            out.append(
                ChildPlacement(
                    child_id=child_id,
                    date_of_birth=persons[child_id].date_of_birth,
                    unit_id=placement.unit_id,
                    placement_type=placement.type,
                )
            )
        return out
