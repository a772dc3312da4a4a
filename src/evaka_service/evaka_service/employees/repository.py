from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Role
from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Employee]:
        raise NotImplementedError

    def create_employee(self, *, full_name: str, username: str, password_hash: str, role: Role) -> int:
        raise NotImplementedError
