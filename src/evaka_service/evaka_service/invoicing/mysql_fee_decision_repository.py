from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..core.enums import FeeDecisionStatus, PlacementType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, open_range
from ..shared.date_range import DateRange
from .model import FeeDecision, FeeDecisionChild, FeeThresholds
from .repository import FeeDecisionRepository, FeeThresholdsRepository

_DECISION_COLUMNS = """
    decision_id, head_of_family_id, partner_id, valid_from, valid_to, status,
    family_size, decision_number, sent_at
"""


def _overlap_clause(period: DateRange) -> tuple[str, tuple]:
    if period.end is None:
        return "(valid_to IS NULL OR valid_to >= %s)", (period.start,)
    return "(valid_from <= %s AND (valid_to IS NULL OR valid_to >= %s))", (period.end, period.start)


def _upsert(cur, decisions: Sequence[FeeDecision]) -> None:
    for d in decisions:
        cur.execute(
            """
            INSERT INTO fee_decisions(
                decision_id, head_of_family_id, partner_id, valid_from, valid_to,
                status, family_size, decision_number, sent_at
            ) VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                partner_id=VALUES(partner_id),
                valid_from=VALUES(valid_from),
                valid_to=VALUES(valid_to),
                status=VALUES(status),
                family_size=VALUES(family_size),
                decision_number=VALUES(decision_number),
                sent_at=VALUES(sent_at)
            """,
            (
                d.id,
                d.head_of_family_id,
                d.partner_id,
                d.valid_from,
                d.valid_to,
                d.status.value,
                d.family_size,
                d.decision_number,
                d.sent_at,
            ),
        )
        cur.execute("DELETE FROM fee_decision_children WHERE decision_id=%s", (d.id,))
        if d.children:
            cur.executemany(
                """
                INSERT INTO fee_decision_children(
                    decision_id, child_id, date_of_birth, unit_id, placement_type,
                    base_fee, sibling_discount, fee
                ) VALUES (%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                [
                    (
                        d.id,
                        c.child_id,
                        c.date_of_birth,
                        c.unit_id,
                        c.placement_type.value,
                        c.base_fee,
                        c.sibling_discount,
                        c.fee,
                    )
                    for c in d.children
                ],
            )


def _mark_sent(cur, decision_ids: Sequence[str], sent_at: datetime) -> None:
    # Row lock keeps concurrent confirmations from handing out the same number.
    cur.execute("SELECT COALESCE(MAX(decision_number), 0) AS last FROM fee_decisions FOR UPDATE")
    r = fetchone(cur)
    next_number = int(r["last"]) + 1 if r else 1
    for decision_id in decision_ids:
        cur.execute(
            "UPDATE fee_decisions SET status=%s, sent_at=%s, decision_number=%s WHERE decision_id=%s",
            (FeeDecisionStatus.SENT.value, sent_at, next_number, decision_id),
        )
        next_number += 1


class MySQLFeeDecisionRepository(FeeDecisionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, where: str, params: tuple) -> list[FeeDecision]:
        cur.execute(
            f"SELECT {_DECISION_COLUMNS} FROM fee_decisions WHERE {where} ORDER BY valid_from ASC",
            params,
        )
        rows = fetchall(cur)
        if not rows:
            return []

        ids_sql, id_params = in_clause(r["decision_id"] for r in rows)
        cur.execute(
            f"""
            SELECT decision_id, child_id, date_of_birth, unit_id, placement_type, base_fee, sibling_discount, fee
            FROM fee_decision_children
            WHERE decision_id IN {ids_sql}
            ORDER BY date_of_birth DESC
            """,
            id_params,
        )
        children: dict[str, list[FeeDecisionChild]] = {}
        for c in fetchall(cur):
            children.setdefault(c["decision_id"], []).append(
                FeeDecisionChild(
                    child_id=int(c["child_id"]),
                    date_of_birth=c["date_of_birth"],
                    unit_id=int(c["unit_id"]),
                    placement_type=PlacementType(c["placement_type"]),
                    base_fee=int(c["base_fee"]),
                    sibling_discount=int(c["sibling_discount"]),
                    fee=int(c["fee"]),
                )
            )

        return [
            FeeDecision(
                id=r["decision_id"],
                head_of_family_id=int(r["head_of_family_id"]),
                partner_id=int(r["partner_id"]) if r.get("partner_id") is not None else None,
                valid_from=r["valid_from"],
                valid_to=r.get("valid_to"),
                status=FeeDecisionStatus(r["status"]),
                family_size=int(r["family_size"]),
                children=tuple(children.get(r["decision_id"], [])),
                decision_number=int(r["decision_number"]) if r.get("decision_number") is not None else None,
                sent_at=r.get("sent_at"),
            )
            for r in rows
        ]

    def get_by_ids(self, decision_ids: Iterable[str]) -> Sequence[FeeDecision]:
        ids_sql, params = in_clause(decision_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, f"decision_id IN {ids_sql}", params)

    def find_for_head_of_family(
        self,
        *,
        head_of_family_id: int,
        period: Optional[DateRange] = None,
        statuses: Optional[Iterable[FeeDecisionStatus]] = None,
    ) -> Sequence[FeeDecision]:
        clauses = ["head_of_family_id=%s"]
        params: tuple = (int(head_of_family_id),)
        if period is not None:
            overlap_sql, overlap_params = _overlap_clause(period)
            clauses.append(overlap_sql)
            params += overlap_params
        if statuses is not None:
            status_sql, status_params = in_clause(s.value for s in statuses)
            clauses.append(f"status IN {status_sql}")
            params += status_params

        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, " AND ".join(clauses), params)

    def find_overlapping(self, *, period: DateRange, statuses: Iterable[FeeDecisionStatus]) -> Sequence[FeeDecision]:
        overlap_sql, params = _overlap_clause(period)
        status_sql, status_params = in_clause(s.value for s in statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, f"{overlap_sql} AND status IN {status_sql}", params + status_params)

    def replace_drafts(self, *, head_of_family_id: int, drafts: Sequence[FeeDecision]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM fee_decisions WHERE head_of_family_id=%s AND status=%s",
                (int(head_of_family_id), FeeDecisionStatus.DRAFT.value),
            )
            deleted = int(cur.rowcount)
            _upsert(cur, drafts)
            return deleted

    def apply_confirmation(
        self,
        *,
        updated: Sequence[FeeDecision],
        deleted_ids: Sequence[str],
        sent_ids: Sequence[str],
        sent_at: datetime,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            _upsert(cur, updated)
            if deleted_ids:
                ids_sql, params = in_clause(deleted_ids)
                cur.execute(f"DELETE FROM fee_decisions WHERE decision_id IN {ids_sql}", params)
            if sent_ids:
                _mark_sent(cur, sent_ids, sent_at)


class MySQLFeeThresholdsRepository(FeeThresholdsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_fee_thresholds(self, *, period: Optional[DateRange] = None) -> Sequence[FeeThresholds]:
        where, params = ("1=1", ())
        if period is not None:
            where, params = _overlap_clause(period)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT * FROM fee_thresholds WHERE {where} ORDER BY valid_from ASC", params)
            return [
                FeeThresholds(
                    thresholds_id=int(r["thresholds_id"]),
                    valid_during=open_range(r, "valid_from", "valid_to"),
                    min_income_threshold={size: int(r[f"min_income_threshold_{size}"]) for size in range(2, 7)},
                    income_threshold_increase_6_plus=int(r["income_threshold_increase_6_plus"]),
                    income_multiplier=Decimal(r["income_multiplier"]),
                    max_fee=int(r["max_fee"]),
                    min_fee=int(r["min_fee"]),
                    sibling_discount_2=Decimal(r["sibling_discount_2"]),
                    sibling_discount_2_plus=Decimal(r["sibling_discount_2_plus"]),
                )
                for r in fetchall(cur)
            ]
