from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import PlacementType
from ..shared.date_range import FiniteDateRange


@dataclass(frozen=True)
class Placement:
    placement_id: int
    child_id: int
    unit_id: int
    type: PlacementType
    start_date: date
    end_date: date

    @property
    def period(self) -> FiniteDateRange:
        return FiniteDateRange(self.start_date, self.end_date)
