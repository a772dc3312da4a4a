from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import IncomeEffect
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Income, Parentship, Partnership, Person
from .repository import FamilyRepository, IncomeRepository, PersonRepository

_PERSON_COLUMNS = """
    person_id, first_name, last_name, date_of_birth, ssn, street_address, postal_code, post_office
"""


def _to_person(r: dict) -> Person:
    return Person(
        person_id=int(r["person_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        date_of_birth=r["date_of_birth"],
        ssn=r.get("ssn") or None,
        street_address=r.get("street_address"),
        postal_code=r.get("postal_code"),
        post_office=r.get("post_office"),
    )


def _to_partnership(r: dict) -> Partnership:
    return Partnership(
        partnership_id=int(r["partnership_id"]),
        person_id=int(r["person_id"]),
        partner_id=int(r["partner_id"]),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
    )


class MySQLPersonRepository(PersonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_ids(self, person_ids: Iterable[int]) -> dict[int, Person]:
        ids_sql, params = in_clause(int(p) for p in set(person_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PERSON_COLUMNS} FROM persons WHERE person_id IN {ids_sql}", params)
            return {int(r["person_id"]): _to_person(r) for r in fetchall(cur)}


class MySQLFamilyRepository(FamilyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_parentships_for_head(self, *, head_of_family_id: int) -> Sequence[Parentship]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT head_of_family_id, child_id, start_date, end_date
                FROM parentships
                WHERE head_of_family_id=%s
                ORDER BY start_date ASC
                """,
                (int(head_of_family_id),),
            )
            return [
                Parentship(
                    head_of_family_id=int(r["head_of_family_id"]),
                    child_id=int(r["child_id"]),
                    start_date=r["start_date"],
                    end_date=r["end_date"],
                )
                for r in fetchall(cur)
            ]

    def get_partnerships_for_person(self, *, person_id: int) -> Sequence[Partnership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT partnership_id, person_id, partner_id, start_date, end_date
                FROM partnerships
                WHERE person_id=%s OR partner_id=%s
                ORDER BY start_date ASC
                """,
                (int(person_id), int(person_id)),
            )
            return [_to_partnership(r) for r in fetchall(cur)]

    def get_partnership(self, *, partnership_id: int) -> Optional[Partnership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT partnership_id, person_id, partner_id, start_date, end_date
                FROM partnerships WHERE partnership_id=%s
                """,
                (int(partnership_id),),
            )
            r = fetchone(cur)
            return _to_partnership(r) if r else None

    def create_partnership(self, *, person_id: int, partner_id: int, start_date: date, end_date: Optional[date]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO partnerships(person_id, partner_id, start_date, end_date) VALUES(%s,%s,%s,%s)",
                (int(person_id), int(partner_id), start_date, end_date),
            )
            return int(cur.lastrowid)

    def update_partnership_duration(self, *, partnership_id: int, start_date: date, end_date: Optional[date]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE partnerships SET start_date=%s, end_date=%s WHERE partnership_id=%s",
                (start_date, end_date, int(partnership_id)),
            )
            return cur.rowcount > 0

    def delete_partnership(self, *, partnership_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM partnerships WHERE partnership_id=%s", (int(partnership_id),))
            return cur.rowcount > 0


class MySQLIncomeRepository(IncomeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_incomes_for_persons(self, person_ids: Iterable[int]) -> Sequence[Income]:
        ids_sql, params = in_clause(int(p) for p in set(person_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT person_id, valid_from, valid_to, effect, total_cents
                FROM incomes
                WHERE person_id IN {ids_sql}
                ORDER BY valid_from ASC
                """,
                params,
            )
            return [
                Income(
                    person_id=int(r["person_id"]),
                    valid_from=r["valid_from"],
                    valid_to=r.get("valid_to"),
                    effect=IncomeEffect(r["effect"]),
                    total_cents=int(r["total_cents"] or 0),
                )
                for r in fetchall(cur)
            ]
