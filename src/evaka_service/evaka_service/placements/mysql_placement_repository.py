from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import PlacementType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import Placement
from .repository import PlacementRepository


class MySQLPlacementRepository(PlacementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_placements_for_children(
        self,
        *,
        child_ids: Iterable[int],
        types: Optional[Iterable[PlacementType]] = None,
    ) -> Sequence[Placement]:
        children_sql, params = in_clause(int(c) for c in child_ids)
        clauses = [f"child_id IN {children_sql}"]
        if types is not None:
            types_sql, type_params = in_clause(t.value for t in types)
            clauses.append(f"type IN {types_sql}")
            params += type_params

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT placement_id, child_id, unit_id, type, start_date, end_date
                FROM placements
                WHERE {" AND ".join(clauses)}
                ORDER BY start_date ASC
                """,
                params,
            )
            return [
                Placement(
                    placement_id=int(r["placement_id"]),
                    child_id=int(r["child_id"]),
                    unit_id=int(r["unit_id"]),
                    type=PlacementType(r["type"]),
                    start_date=r["start_date"],
                    end_date=r["end_date"],
                )
                for r in fetchall(cur)
            ]
