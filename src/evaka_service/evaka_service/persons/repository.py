from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from .model import Income, Parentship, Partnership, Person


class PersonRepository(Protocol):
    def get_by_ids(self, person_ids: Iterable[int]) -> dict[int, Person]:
        raise NotImplementedError


class FamilyRepository(Protocol):
    def get_parentships_for_head(self, *, head_of_family_id: int) -> Sequence[Parentship]:
        raise NotImplementedError

    def get_partnerships_for_person(self, *, person_id: int) -> Sequence[Partnership]:
        raise NotImplementedError

    def get_partnership(self, *, partnership_id: int) -> Optional[Partnership]:
        raise NotImplementedError

    def create_partnership(self, *, person_id: int, partner_id: int, start_date: date, end_date: Optional[date]) -> int:
        raise NotImplementedError

    def update_partnership_duration(self, *, partnership_id: int, start_date: date, end_date: Optional[date]) -> bool:
        raise NotImplementedError

    def delete_partnership(self, *, partnership_id: int) -> bool:
        raise NotImplementedError


class IncomeRepository(Protocol):
    def get_incomes_for_persons(self, person_ids: Iterable[int]) -> Sequence[Income]:
        raise NotImplementedError
