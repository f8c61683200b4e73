from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..roles.hierarchy import normalize_role
from .model import EmployeeProfile
from .repository import EmployeeRepository

_COLUMNS = "id, external_id, name, email, role, position, department_id, hire_date, version"

FIRST_USER_LOCK = "employee_portal.first_user_setup"


def _to_profile(row: dict) -> EmployeeProfile:
    return EmployeeProfile(
        profile_id=int(row["id"]),
        external_id=row["external_id"],
        name=row["name"],
        email=row["email"],
        # Older rows may hold legacy spellings such as 'SUPER_ADMIN'.
        role=normalize_role(row["role"]),
        position=row.get("position") or "",
        department_id=row.get("department_id"),
        hire_date=row.get("hire_date"),
        version=int(row.get("version") or 0),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, lock_timeout_seconds: int = 5):
        self._conn_factory = conn_factory
        self._lock_timeout = int(lock_timeout_seconds)

    def find_by_id(self, profile_id: int) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (int(profile_id),))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def find_by_external_id(self, external_id: str) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE external_id=%s", (external_id,))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def update_role(
        self,
        profile_id: int,
        role: Role,
        *,
        position: str,
        expected_version: int,
    ) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET role=%s, position=%s, version=version+1, updated_at=UTC_TIMESTAMP()
                WHERE id=%s AND version=%s
                """,
                (role.value, position, int(profile_id), int(expected_version)),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (int(profile_id),))
            return _to_profile(fetchone(cur))

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM employees")
            row = fetchone(cur)
            return int(row["n"]) if row else 0

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
        with db_cursor(self._conn_factory) as (conn, cur):
            if only_if_empty:
                cur.execute("SELECT GET_LOCK(%s, %s) AS got", (FIRST_USER_LOCK, self._lock_timeout))
                got = fetchone(cur)
                if not got or not got["got"]:
                    return None
            try:
                if only_if_empty:
                    cur.execute("SELECT COUNT(*) AS n FROM employees")
                    if int(fetchone(cur)["n"]) > 0:
                        return None
                cur.execute(
                    """
                    INSERT INTO employees(external_id, name, email, role, position, hire_date, version)
                    VALUES(%s,%s,%s,%s,%s,%s,0)
                    """,
                    (external_id, name, email, role.value, position, hire_date),
                )
                new_id = int(cur.lastrowid)
                # Visible to the next lock holder before the lock is released.
                conn.commit()
            except mysql.connector.IntegrityError:
                # external_id is UNIQUE
                return None
            finally:
                if only_if_empty:
                    cur.execute("SELECT RELEASE_LOCK(%s)", (FIRST_USER_LOCK,))
                    cur.fetchall()

            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (new_id,))
            return _to_profile(fetchone(cur))

    def list_all(self) -> Sequence[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY created_at ASC, id ASC")
            return [_to_profile(r) for r in fetchall(cur)]
