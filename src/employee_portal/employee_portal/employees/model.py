from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class EmployeeProfile:
    """Domain entity: the internal mirror of an identity-provider user.

    Note: Plain data object (no DB access). `version` is bumped on every role write.
    """

    profile_id: int
    external_id: str
    name: str
    email: str
    role: Role
    position: str
    department_id: Optional[int]
    hire_date: Optional[date]
    version: int = 0
