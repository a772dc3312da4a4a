from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Employee account. Plain data object, no DB access."""

    employee_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    is_active: bool = True
