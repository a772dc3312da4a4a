from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import pandas as pd

from ..common.validators import require_role
from ..core.enums import FeeDecisionStatus, Role
from ..daycare.repository import DaycareRepository
from ..invoicing.repository import FeeDecisionRepository
from ..persons.repository import PersonRepository
from ..shared.date_range import FiniteDateRange

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeDecisionReportRow:
    area_code: Optional[int]
    amount_of_decisions: int
    total_sum_cents: int
    amount_without_ssn: int
    amount_without_address: int
    amount_with_zero_price: int


@dataclass(frozen=True)
class FeeDecisionReport:
    period: FiniteDateRange
    report_rows: list[FeeDecisionReportRow] = field(default_factory=list)

    @property
    def total_amount_of_decisions(self) -> int:
        return sum(r.amount_of_decisions for r in self.report_rows)

    @property
    def total_sum_cents(self) -> int:
        return sum(r.total_sum_cents for r in self.report_rows)

    @property
    def total_amount_without_ssn(self) -> int:
        return sum(r.amount_without_ssn for r in self.report_rows)

    @property
    def total_amount_without_address(self) -> int:
        return sum(r.amount_without_address for r in self.report_rows)

    @property
    def total_amount_with_zero_price(self) -> int:
        return sum(r.amount_with_zero_price for r in self.report_rows)


class FeeDecisionReportService:
    """Monthly summary of sent fee decisions, grouped by the area of the children's units."""

    def __init__(self, fee_decisions: FeeDecisionRepository, persons: PersonRepository, daycares: DaycareRepository):
        self._fee_decisions = fee_decisions
        self._persons = persons
        self._daycares = daycares

    def build_monthly_report(self, *, current_role: Role, month_of: date) -> FeeDecisionReport:
        require_role(current_role, {Role.ADMIN, Role.FINANCE_ADMIN})
        period = FiniteDateRange.of_month(month_of.year, month_of.month)

        decisions = self._fee_decisions.find_overlapping(
            period=period.as_date_range(), statuses=[FeeDecisionStatus.SENT]
        )
        heads = self._persons.get_by_ids(d.head_of_family_id for d in decisions)
        area_by_unit = {u.daycare_id: u.area_code for u in self._daycares.list_daycares()}

        groups: dict[Optional[int], list] = {}
        for d in decisions:
            # A family is reported under the area of its youngest child's unit
            area = area_by_unit.get(d.children[0].unit_id) if d.children else None
            groups.setdefault(area, []).append(d)

        rows = []
        for area, area_decisions in groups.items():
            area_heads = [heads.get(d.head_of_family_id) for d in area_decisions]
            rows.append(
                FeeDecisionReportRow(
                    area_code=area,
                    amount_of_decisions=len(area_decisions),
                    total_sum_cents=sum(d.total_fee for d in area_decisions),
                    amount_without_ssn=sum(1 for h in area_heads if h is None or not (h.ssn or "").strip()),
                    amount_without_address=sum(1 for h in area_heads if h is None or not h.has_usable_address()),
                    amount_with_zero_price=sum(1 for d in area_decisions if d.total_fee == 0),
                )
            )
        rows.sort(key=lambda r: (r.area_code is None, r.area_code or 0))

        _LOGGER.info("Fee decision report for %s: %d decisions", period, len(decisions))
        return FeeDecisionReport(period=period, report_rows=rows)

    @staticmethod
    def export_xlsx(report: FeeDecisionReport) -> bytes:
        df = pd.DataFrame(
            [
                {
                    "area_code": r.area_code if r.area_code is not None else "-",
                    "decisions": r.amount_of_decisions,
                    "total_eur": r.total_sum_cents / 100,
                    "without_ssn": r.amount_without_ssn,
                    "without_address": r.amount_without_address,
                    "zero_price": r.amount_with_zero_price,
                }
                for r in report.report_rows
            ],
            columns=["area_code", "decisions", "total_eur", "without_ssn", "without_address", "zero_price"],
        )
        totals = pd.DataFrame(
            [
                {
                    "area_code": "TOTAL",
                    "decisions": report.total_amount_of_decisions,
                    "total_eur": report.total_sum_cents / 100,
                    "without_ssn": report.total_amount_without_ssn,
                    "without_address": report.total_amount_without_address,
                    "zero_price": report.total_amount_with_zero_price,
                }
            ]
        )
        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            pd.concat([df, totals], ignore_index=True).to_excel(writer, index=False, sheet_name="fee_decisions")
        return out.getvalue()
