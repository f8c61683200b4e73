"""Role hierarchy: the closed, ordered role set and adjacency queries."""

from __future__ import annotations

import re
from typing import Optional, Tuple

from ..core.enums import Direction, Role
from ..core.exceptions import UnknownRole

ORDERED_ROLES: Tuple[Role, ...] = (
    Role.INTERN,
    Role.EMPLOYEE,
    Role.MANAGER,
    Role.ADMINISTRATOR,
    Role.SUPER_ADMINISTRATOR,
)

_RANKS = {role: rank for rank, role in enumerate(ORDERED_ROLES)}

# Spellings seen in identity metadata and older records.
_ALIASES = {
    "intern": Role.INTERN,
    "employee": Role.EMPLOYEE,
    "staff": Role.EMPLOYEE,
    "manager": Role.MANAGER,
    "admin": Role.ADMINISTRATOR,
    "administrator": Role.ADMINISTRATOR,
    "super_admin": Role.SUPER_ADMINISTRATOR,
    "superadmin": Role.SUPER_ADMINISTRATOR,
    "super_administrator": Role.SUPER_ADMINISTRATOR,
}

_DISPLAY_NAMES = {
    Role.INTERN: "Intern",
    Role.EMPLOYEE: "Employee",
    Role.MANAGER: "Manager",
    Role.ADMINISTRATOR: "Administrator",
    Role.SUPER_ADMINISTRATOR: "Super Administrator",
}

_DASHBOARDS = {
    Role.INTERN: "/dashboard/intern",
    Role.EMPLOYEE: "/dashboard/employee",
    Role.MANAGER: "/dashboard/manager",
    Role.ADMINISTRATOR: "/dashboard/admin",
    Role.SUPER_ADMINISTRATOR: "/dashboard/super-admin",
}


def normalize_role(value) -> Role:
    """Map any accepted spelling ('SUPER_ADMIN', 'Super Administrator', ...) to a Role."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        raise UnknownRole(value)
    key = re.sub(r"[\s\-]+", "_", value.strip()).lower()
    try:
        return _ALIASES[key]
    except KeyError:
        raise UnknownRole(value) from None


def rank_of(role) -> int:
    return _RANKS[normalize_role(role)]


def next_role(role, direction: Direction) -> Optional[Role]:
    rank = rank_of(role)
    step = 1 if Direction(direction) == Direction.UP else -1
    nxt = rank + step
    if 0 <= nxt < len(ORDERED_ROLES):
        return ORDERED_ROLES[nxt]
    return None


def display_name(role) -> str:
    return _DISPLAY_NAMES[normalize_role(role)]


def dashboard_route(role) -> str:
    return _DASHBOARDS[normalize_role(role)]


def initial_role_options() -> Tuple[Role, ...]:
    """Roles a new user may pick for themselves."""
    return (Role.INTERN, Role.EMPLOYEE)
