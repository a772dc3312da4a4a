from __future__ import annotations

from typing import Iterable

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive_id(value: int, field_name: str) -> int:
    if value is None or int(value) <= 0:
        raise ValidationError(f"{field_name} is not valid")
    return int(value)


def require_role(current_role: Role, allowed: Iterable[Role]) -> None:
    if current_role not in set(allowed):
        raise AuthorizationError("Not permitted")
