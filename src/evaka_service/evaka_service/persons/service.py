from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.validators import require_positive_id, require_role
from ..core.enums import Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..shared.date_range import DateRange
from .model import Partnership
from .repository import FamilyRepository

_LOGGER = logging.getLogger(__name__)


class PartnershipService:
    def __init__(self, families: FamilyRepository):
        self._families = families

    def _check_overlaps(self, person_id: int, period: DateRange, *, ignore_id: Optional[int] = None) -> None:
        for p in self._families.get_partnerships_for_person(person_id=person_id):
            if p.partnership_id != ignore_id and p.period.overlaps(period):
                raise ConflictError(f"Person {person_id} already has a partner during {p.period}")

    def create_partnership(
        self,
        *,
        current_role: Role,
        person_id: int,
        partner_id: int,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> Partnership:
        require_role(current_role, {Role.ADMIN, Role.FINANCE_ADMIN})
        person_id = require_positive_id(person_id, "person_id")
        partner_id = require_positive_id(partner_id, "partner_id")
        if person_id == partner_id:
            raise ValidationError("A person cannot be their own partner")

        period = DateRange(start_date, end_date)
        self._check_overlaps(person_id, period)
        self._check_overlaps(partner_id, period)

        partnership_id = self._families.create_partnership(
            person_id=person_id, partner_id=partner_id, start_date=start_date, end_date=end_date
        )
        _LOGGER.info("Created partnership %s between %s and %s", partnership_id, person_id, partner_id)
        return Partnership(partnership_id, person_id, partner_id, start_date, end_date)

    def update_partnership_duration(
        self,
        *,
        current_role: Role,
        partnership_id: int,
        start_date: date,
        end_date: Optional[date],
    ) -> None:
        require_role(current_role, {Role.ADMIN, Role.FINANCE_ADMIN})
        existing = self._families.get_partnership(partnership_id=int(partnership_id))
        if not existing:
            raise NotFoundError(f"No partnership found with id {partnership_id}")

        period = DateRange(start_date, end_date)
        self._check_overlaps(existing.person_id, period, ignore_id=existing.partnership_id)
        self._check_overlaps(existing.partner_id, period, ignore_id=existing.partnership_id)

        if not self._families.update_partnership_duration(
            partnership_id=int(partnership_id), start_date=start_date, end_date=end_date
        ):
            raise NotFoundError(f"No partnership found with id {partnership_id}")

    def delete_partnership(self, *, current_role: Role, partnership_id: int) -> Optional[Partnership]:
        require_role(current_role, {Role.ADMIN, Role.FINANCE_ADMIN})
        existing = self._families.get_partnership(partnership_id=int(partnership_id))
        if existing:
            self._families.delete_partnership(partnership_id=int(partnership_id))
            _LOGGER.info("Deleted partnership %s", partnership_id)
        return existing
