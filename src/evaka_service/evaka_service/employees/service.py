from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_non_empty, require_role
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .repository import EmployeeRepository

_LOGGER = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class SessionEmployee:
    """What we store into Flask session after login."""

    employee_id: int
    full_name: str
    role: Role


class AuthService:
    """Use case: authenticate employee (login)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def authenticate(self, username: str, password: str) -> SessionEmployee:
        employee = self._employees.get_by_username((username or "").strip())
        if not employee or not employee.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(employee.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            _LOGGER.info("Failed login for %s", employee.username)
            raise AuthenticationError("Invalid username or password")

        return SessionEmployee(employee_id=employee.employee_id, full_name=employee.full_name, role=employee.role)

    def get_session_employee(self, employee_id: int) -> SessionEmployee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise AuthenticationError("Employee is no longer active")
        return SessionEmployee(employee_id=employee.employee_id, full_name=employee.full_name, role=employee.role)

    def create_employee(self, *, current_role: Role, full_name: str, username: str, password: str, role: Role) -> int:
        require_role(current_role, {Role.ADMIN})
        full_name = require_non_empty(full_name, "full_name")
        username = require_non_empty(username, "username")
        if password is None or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if self._employees.get_by_username(username):
            raise ValidationError("Username already exists")

        return self._employees.create_employee(
            full_name=full_name,
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
        )
