from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_weekdays, fetchall, finite_range
from ..shared.date_range import FiniteDateRange
from ..shared.date_set import DateSet
from .model import Daycare, PreschoolTerm
from .repository import DaycareRepository, HolidayRepository, PreschoolTermRepository


def _to_daycare(r: dict) -> Daycare:
    return Daycare(
        daycare_id=int(r["daycare_id"]),
        name=r["name"],
        area_code=int(r["area_code"]) if r.get("area_code") is not None else None,
        operation_days=decode_weekdays(r["operation_days"]),
        language=r.get("language") or "fi",
    )


class MySQLDaycareRepository(DaycareRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_daycares(self) -> Sequence[Daycare]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT daycare_id, name, area_code, operation_days, language FROM daycares ORDER BY name")
            return [_to_daycare(r) for r in fetchall(cur)]


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_holidays(self, period: FiniteDateRange) -> set[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT date FROM holidays WHERE date BETWEEN %s AND %s", (period.start, period.end))
            return {r["date"] for r in fetchall(cur)}

    def upsert_holiday(self, *, holiday: date, description: Optional[str] = None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(date, description) VALUES(%s, %s)
                ON DUPLICATE KEY UPDATE description=VALUES(description)
                """,
                (holiday, description),
            )


class MySQLPreschoolTermRepository(PreschoolTermRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_preschool_terms(self) -> Sequence[PreschoolTerm]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    term_id,
                    finnish_preschool_start, finnish_preschool_end,
                    swedish_preschool_start, swedish_preschool_end,
                    extended_term_start, extended_term_end,
                    application_period_start, application_period_end
                FROM preschool_terms
                ORDER BY extended_term_start
                """
            )
            terms = fetchall(cur)

            cur.execute("SELECT term_id, start_date, end_date FROM preschool_term_breaks")
            breaks: dict[int, list[FiniteDateRange]] = {}
            for b in fetchall(cur):
                breaks.setdefault(int(b["term_id"]), []).append(finite_range(b, "start_date", "end_date"))

            return [
                PreschoolTerm(
                    term_id=int(r["term_id"]),
                    finnish_preschool=finite_range(r, "finnish_preschool_start", "finnish_preschool_end"),
                    swedish_preschool=finite_range(r, "swedish_preschool_start", "swedish_preschool_end"),
                    extended_term=finite_range(r, "extended_term_start", "extended_term_end"),
                    application_period=finite_range(r, "application_period_start", "application_period_end"),
                    term_breaks=DateSet(breaks.get(int(r["term_id"]), [])),
                )
                for r in terms
            ]

    def insert_preschool_term(self, term: PreschoolTerm) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO preschool_terms(
                    finnish_preschool_start, finnish_preschool_end,
                    swedish_preschool_start, swedish_preschool_end,
                    extended_term_start, extended_term_end,
                    application_period_start, application_period_end
                ) VALUES (%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    term.finnish_preschool.start,
                    term.finnish_preschool.end,
                    term.swedish_preschool.start,
                    term.swedish_preschool.end,
                    term.extended_term.start,
                    term.extended_term.end,
                    term.application_period.start,
                    term.application_period.end,
                ),
            )
            term_id = int(cur.lastrowid)
            for r in term.term_breaks.ranges():
                cur.execute(
                    "INSERT INTO preschool_term_breaks(term_id, start_date, end_date) VALUES(%s,%s,%s)",
                    (term_id, r.start, r.end),
                )
            return term_id
