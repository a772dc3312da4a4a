from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..core.enums import AbsenceCategory, AbsenceType


@dataclass(frozen=True)
class Absence:
    absence_id: int
    child_id: int
    date: date
    category: AbsenceCategory
    absence_type: AbsenceType
    modified_by: int
    modified_at: datetime


@dataclass(frozen=True)
class AbsenceUpsert:
    child_id: int
    date: date
    category: AbsenceCategory
    absence_type: AbsenceType


@dataclass(frozen=True)
class AbsenceDelete:
    child_id: int
    date: date
    category: AbsenceCategory
