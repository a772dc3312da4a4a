from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Employee roles used for access checks."""

    ADMIN = "ADMIN"
    FINANCE_ADMIN = "FINANCE_ADMIN"
    UNIT_SUPERVISOR = "UNIT_SUPERVISOR"
    STAFF = "STAFF"


class AbsenceType(str, Enum):
    OTHER_ABSENCE = "OTHER_ABSENCE"
    SICKLEAVE = "SICKLEAVE"
    UNKNOWN_ABSENCE = "UNKNOWN_ABSENCE"
    PLANNED_ABSENCE = "PLANNED_ABSENCE"
    PARENTLEAVE = "PARENTLEAVE"
    FORCE_MAJEURE = "FORCE_MAJEURE"
    FREE_ABSENCE = "FREE_ABSENCE"
    UNAUTHORIZED_ABSENCE = "UNAUTHORIZED_ABSENCE"


class AbsenceCategory(str, Enum):
    BILLABLE = "BILLABLE"
    NONBILLABLE = "NONBILLABLE"


class PlacementType(str, Enum):
    DAYCARE = "DAYCARE"
    DAYCARE_PART_TIME = "DAYCARE_PART_TIME"
    PRESCHOOL = "PRESCHOOL"
    PRESCHOOL_DAYCARE = "PRESCHOOL_DAYCARE"
    PREPARATORY = "PREPARATORY"
    PREPARATORY_DAYCARE = "PREPARATORY_DAYCARE"
    CLUB = "CLUB"


class ScheduleType(str, Enum):
    FIXED_SCHEDULE = "FIXED_SCHEDULE"
    TERM_BREAK = "TERM_BREAK"


class FeeDecisionStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    ANNULLED = "ANNULLED"


class IncomeEffect(str, Enum):
    INCOME = "INCOME"
    MAX_FEE_ACCEPTED = "MAX_FEE_ACCEPTED"
    NOT_AVAILABLE = "NOT_AVAILABLE"


class KoskiStatus(str, Enum):
    """Study right status codes (koskiopiskeluoikeudentila)."""

    PRESENT = "lasna"
    HOLIDAY = "loma"
    INTERRUPTED = "valiaikaisestikeskeytynyt"
    QUALIFIED = "valmistunut"
    RESIGNED = "eronnut"
