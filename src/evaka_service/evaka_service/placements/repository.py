from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import PlacementType
from .model import Placement


class PlacementRepository(Protocol):
    def get_placements_for_children(
        self,
        *,
        child_ids: Iterable[int],
        types: Optional[Iterable[PlacementType]] = None,
    ) -> Sequence[Placement]:
        raise NotImplementedError
