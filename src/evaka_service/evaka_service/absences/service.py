from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_positive_id, require_role
from ..core.constants import MAX_ABSENCE_UPSERT_DAYS
from ..core.enums import AbsenceType, Role
from ..core.exceptions import ValidationError
from ..shared.date_range import FiniteDateRange
from .model import Absence, AbsenceDelete, AbsenceUpsert
from .repository import AbsenceRepository

_LOGGER = logging.getLogger(__name__)

_EDITOR_ROLES = {Role.ADMIN, Role.UNIT_SUPERVISOR, Role.STAFF}


class AbsenceService:
    def __init__(self, absences: AbsenceRepository):
        self._absences = absences

    def _validate(self, absences: Sequence[AbsenceUpsert], *, today: date) -> None:
        if not absences:
            raise ValidationError("No absences given")

        dates = [a.date for a in absences]
        if (max(dates) - min(dates)).days + 1 > MAX_ABSENCE_UPSERT_DAYS:
            raise ValidationError(f"Absences may span at most {MAX_ABSENCE_UPSERT_DAYS} days")

        for a in absences:
            require_positive_id(a.child_id, "child_id")
            if a.absence_type == AbsenceType.SICKLEAVE and a.date > today:
                raise ValidationError("Sick leave cannot be marked in advance")

    def insert_absences(
        self,
        *,
        current_role: Role,
        user_id: int,
        absences: Sequence[AbsenceUpsert],
        now: datetime | None = None,
    ) -> None:
        """Add new absences. Raises ConflictError if any of them is already marked."""

        require_role(current_role, _EDITOR_ROLES)
        now = now or now_local()
        self._validate(absences, today=now.date())

        self._absences.insert_absences(now=now, user_id=int(user_id), absences=list(absences))
        _LOGGER.info("Employee %s inserted %d absences", user_id, len(absences))

    def upsert_absences(
        self,
        *,
        current_role: Role,
        user_id: int,
        absences: Sequence[AbsenceUpsert],
        now: datetime | None = None,
    ) -> list[int]:
        require_role(current_role, _EDITOR_ROLES)
        now = now or now_local()
        self._validate(absences, today=now.date())

        ids = self._absences.upsert_absences(now=now, user_id=int(user_id), absences=list(absences))
        _LOGGER.info("Employee %s upserted %d absences", user_id, len(ids))
        return ids

    def upsert_generated_absences(self, *, absences: Sequence[AbsenceUpsert], now: datetime | None = None) -> list[int]:
        """Used by scheduled jobs. Never overwrites absences marked by employees."""

        now = now or now_local()
        self._validate(absences, today=now.date())
        return self._absences.upsert_generated_absences(now=now, absences=list(absences))

    def delete_absences(self, *, current_role: Role, deletions: Sequence[AbsenceDelete]) -> list[int]:
        require_role(current_role, _EDITOR_ROLES)
        if not deletions:
            return []
        ids = self._absences.batch_delete_absences(list(deletions))
        _LOGGER.info("Deleted %d absences", len(ids))
        return ids

    def get_child_absences(self, *, child_id: int, period: FiniteDateRange) -> list[Absence]:
        require_positive_id(child_id, "child_id")
        return list(self._absences.get_absences_for_child(child_id=int(child_id), period=period))

