from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from ..shared.date_range import FiniteDateRange
from .model import Absence, AbsenceDelete, AbsenceUpsert


class AbsenceRepository(Protocol):
    def insert_absences(self, *, now: datetime, user_id: int, absences: Sequence[AbsenceUpsert]) -> None:
        """Fails if any of the absences already exists."""

        raise NotImplementedError

    def upsert_absences(self, *, now: datetime, user_id: int, absences: Sequence[AbsenceUpsert]) -> list[int]:
        """Updates the details if an absence already exists."""

        raise NotImplementedError

    def upsert_generated_absences(self, *, now: datetime, absences: Sequence[AbsenceUpsert]) -> list[int]:
        """If the absence already exists, updates only if it was generated by the system."""

        raise NotImplementedError

    def batch_delete_absences(self, deletions: Sequence[AbsenceDelete]) -> list[int]:
        raise NotImplementedError

    def get_absences_for_child(self, *, child_id: int, period: FiniteDateRange) -> Sequence[Absence]:
        raise NotImplementedError
