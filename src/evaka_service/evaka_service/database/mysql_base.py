from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from ..shared.date_range import DateRange, FiniteDateRange
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: Iterable[Any]) -> tuple[str, tuple]:
    """Build an `IN (%s, %s, ...)` placeholder list.

    An empty input yields `IN (NULL)` so the query matches nothing.
    """

    params = tuple(values)
    if not params:
        return "(NULL)", ()
    return "(" + ",".join(["%s"] * len(params)) + ")", params


def decode_weekdays(value: Any) -> frozenset[int]:
    """Normalize weekday sets across connector implementations.

    mysql-connector can return SET columns as:
    - set of strings
    - comma separated string
    """

    if value is None:
        return frozenset()
    if isinstance(value, (set, frozenset, list, tuple)):
        return frozenset(int(v) for v in value)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return frozenset(int(v) for v in value.split(",") if v.strip())
    raise TypeError(f"Unsupported weekday value type: {type(value)!r}")


def finite_range(row: Dict[str, Any], start_col: str, end_col: str) -> FiniteDateRange:
    return FiniteDateRange(row[start_col], row[end_col])


def open_range(row: Dict[str, Any], start_col: str, end_col: str) -> DateRange:
    end: Optional[date] = row.get(end_col)
    return DateRange(row[start_col], end)
