from __future__ import annotations

from datetime import datetime
from typing import Sequence

from mysql.connector import errors as mysql_errors

from ..core.constants import SYSTEM_USER_ID
from ..core.enums import AbsenceCategory, AbsenceType
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..shared.date_range import FiniteDateRange
from .model import Absence, AbsenceDelete, AbsenceUpsert
from .repository import AbsenceRepository


def _absence_id(cur, a) -> int:
    cur.execute(
        "SELECT absence_id FROM absences WHERE child_id=%s AND date=%s AND category=%s",
        (int(a.child_id), a.date, a.category.value),
    )
    r = fetchone(cur)
    return int(r["absence_id"])


class MySQLAbsenceRepository(AbsenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_absences(self, *, now: datetime, user_id: int, absences: Sequence[AbsenceUpsert]) -> None:
        try:
            self._insert(now=now, user_id=user_id, absences=absences)
        except mysql_errors.IntegrityError as e:
            raise ConflictError("Some of the absences already exist") from e

    def _insert(self, *, now: datetime, user_id: int, absences: Sequence[AbsenceUpsert]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO absences(child_id, date, category, absence_type, modified_by, modified_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                [
                    (int(a.child_id), a.date, a.category.value, a.absence_type.value, int(user_id), now)
                    for a in absences
                ],
            )

    def upsert_absences(self, *, now: datetime, user_id: int, absences: Sequence[AbsenceUpsert]) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for a in absences:
                cur.execute(
                    """
                    INSERT INTO absences(child_id, date, category, absence_type, modified_by, modified_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE
                        absence_type=VALUES(absence_type),
                        modified_by=VALUES(modified_by),
                        modified_at=VALUES(modified_at)
                    """,
                    (int(a.child_id), a.date, a.category.value, a.absence_type.value, int(user_id), now),
                )
                ids.append(_absence_id(cur, a))
        return ids

    def upsert_generated_absences(self, *, now: datetime, absences: Sequence[AbsenceUpsert]) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for a in absences:
                # modified_by is never assigned here, so both IFs see the original author
                cur.execute(
                    """
                    INSERT INTO absences(child_id, date, category, absence_type, modified_by, modified_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE
                        absence_type=IF(modified_by=%s, VALUES(absence_type), absence_type),
                        modified_at=IF(modified_by=%s, VALUES(modified_at), modified_at)
                    """,
                    (
                        int(a.child_id),
                        a.date,
                        a.category.value,
                        a.absence_type.value,
                        SYSTEM_USER_ID,
                        now,
                        SYSTEM_USER_ID,
                        SYSTEM_USER_ID,
                    ),
                )
                if cur.rowcount > 0:
                    ids.append(_absence_id(cur, a))
        return ids

    def batch_delete_absences(self, deletions: Sequence[AbsenceDelete]) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for d in deletions:
                cur.execute(
                    "SELECT absence_id FROM absences WHERE child_id=%s AND date=%s AND category=%s",
                    (int(d.child_id), d.date, d.category.value),
                )
                r = fetchone(cur)
                if not r:
                    continue
                cur.execute("DELETE FROM absences WHERE absence_id=%s", (int(r["absence_id"]),))
                ids.append(int(r["absence_id"]))
        return ids

    def get_absences_for_child(self, *, child_id: int, period: FiniteDateRange) -> Sequence[Absence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT absence_id, child_id, date, category, absence_type, modified_by, modified_at
                FROM absences
                WHERE child_id=%s AND date BETWEEN %s AND %s
                ORDER BY date ASC, category ASC
                """,
                (int(child_id), period.start, period.end),
            )
            return [
                Absence(
                    absence_id=int(r["absence_id"]),
                    child_id=int(r["child_id"]),
                    date=r["date"],
                    category=AbsenceCategory(r["category"]),
                    absence_type=AbsenceType(r["absence_type"]),
                    modified_by=int(r["modified_by"]),
                    modified_at=r["modified_at"],
                )
                for r in fetchall(cur)
            ]
