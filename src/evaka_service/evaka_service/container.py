from __future__ import annotations

from dataclasses import dataclass

from .absences.mysql_absence_repository import MySQLAbsenceRepository
from .absences.service import AbsenceService
from .daycare.mysql_daycare_repository import (
    MySQLDaycareRepository,
    MySQLHolidayRepository,
    MySQLPreschoolTermRepository,
)
from .daycare.service import DaycareService
from .database.connection import DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import AuthService
from .invoicing.generator import FinanceDecisionGenerator
from .invoicing.mysql_fee_decision_repository import MySQLFeeDecisionRepository, MySQLFeeThresholdsRepository
from .invoicing.service import FeeDecisionService
from .koski.service import KoskiService
from .persons.mysql_person_repository import MySQLFamilyRepository, MySQLIncomeRepository, MySQLPersonRepository
from .persons.service import PartnershipService
from .placements.mysql_placement_repository import MySQLPlacementRepository
from .reports.service import FeeDecisionReportService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    auth_service: AuthService
    daycare_service: DaycareService
    absence_service: AbsenceService
    koski_service: KoskiService
    partnership_service: PartnershipService
    fee_decision_service: FeeDecisionService
    fee_decision_report_service: FeeDecisionReportService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.from_dict(db_config)

    employees_repo = MySQLEmployeeRepository(conn)
    daycares_repo = MySQLDaycareRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    terms_repo = MySQLPreschoolTermRepository(conn)
    absences_repo = MySQLAbsenceRepository(conn)
    placements_repo = MySQLPlacementRepository(conn)
    persons_repo = MySQLPersonRepository(conn)
    families_repo = MySQLFamilyRepository(conn)
    incomes_repo = MySQLIncomeRepository(conn)
    fee_decisions_repo = MySQLFeeDecisionRepository(conn)
    fee_thresholds_repo = MySQLFeeThresholdsRepository(conn)

    generator = FinanceDecisionGenerator(
        persons_repo,
        families_repo,
        placements_repo,
        incomes_repo,
        fee_decisions_repo,
        fee_thresholds_repo,
    )

    return Container(
        conn=conn,
        auth_service=AuthService(employees_repo),
        daycare_service=DaycareService(daycares_repo, holidays_repo, terms_repo),
        absence_service=AbsenceService(absences_repo),
        koski_service=KoskiService(placements_repo, holidays_repo, absences_repo),
        partnership_service=PartnershipService(families_repo),
        fee_decision_service=FeeDecisionService(fee_decisions_repo, generator),
        fee_decision_report_service=FeeDecisionReportService(fee_decisions_repo, persons_repo, daycares_repo),
    )
