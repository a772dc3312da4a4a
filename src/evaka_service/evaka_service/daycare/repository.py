from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..shared.date_range import FiniteDateRange
from .model import Daycare, PreschoolTerm


class DaycareRepository(Protocol):
    def list_daycares(self) -> Sequence[Daycare]:
        raise NotImplementedError


class HolidayRepository(Protocol):
    def get_holidays(self, period: FiniteDateRange) -> set[date]:
        raise NotImplementedError

    def upsert_holiday(self, *, holiday: date, description: Optional[str] = None) -> None:
        raise NotImplementedError


class PreschoolTermRepository(Protocol):
    def get_preschool_terms(self) -> Sequence[PreschoolTerm]:
        """All terms ordered by extended term."""

        raise NotImplementedError

    def insert_preschool_term(self, term: PreschoolTerm) -> int:
        raise NotImplementedError
