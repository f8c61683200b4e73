from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import EmployeeProfile


class EmployeeRepository(Protocol):
    """Profile store interface.

    Note (DIP): services depend on this protocol, not on a concrete database.
    """

    def find_by_id(self, profile_id: int) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    def find_by_external_id(self, external_id: str) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    def update_role(
        self,
        profile_id: int,
        role: Role,
        *,
        position: str,
        expected_version: int,
    ) -> Optional[EmployeeProfile]:
        """Write the role if `expected_version` still matches; None on a version mismatch."""
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        external_id: str,
        name: str,
        email: str,
        role: Role,
        position: str,
        hire_date: date,
        only_if_empty: bool = False,
    ) -> Optional[EmployeeProfile]:
        """Insert a profile. With `only_if_empty`, returns None when any profile exists."""
        raise NotImplementedError

    def list_all(self) -> Sequence[EmployeeProfile]:
        raise NotImplementedError
