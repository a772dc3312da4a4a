from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import IncomeEffect
from ..shared.date_range import DateRange, FiniteDateRange


@dataclass(frozen=True)
class Person:
    person_id: int
    first_name: str
    last_name: str
    date_of_birth: date
    ssn: Optional[str] = None
    street_address: Optional[str] = None
    postal_code: Optional[str] = None
    post_office: Optional[str] = None

    def has_usable_address(self) -> bool:
        return all(v and v.strip() for v in (self.street_address, self.postal_code, self.post_office))


@dataclass(frozen=True)
class Parentship:
    """Child living in the head of family's household."""

    head_of_family_id: int
    child_id: int
    start_date: date
    end_date: date

    @property
    def period(self) -> FiniteDateRange:
        return FiniteDateRange(self.start_date, self.end_date)


@dataclass(frozen=True)
class Partnership:
    partnership_id: int
    person_id: int
    partner_id: int
    start_date: date
    end_date: Optional[date] = None

    @property
    def period(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    def partner_of(self, person_id: int) -> int:
        return self.partner_id if self.person_id == person_id else self.person_id


@dataclass(frozen=True)
class Income:
    person_id: int
    valid_from: date
    valid_to: Optional[date]
    effect: IncomeEffect
    total_cents: int = 0

    @property
    def period(self) -> DateRange:
        return DateRange(self.valid_from, self.valid_to)
