import pytest

from src.employee_portal.employee_portal.core.enums import Direction, Role
from src.employee_portal.employee_portal.core.exceptions import UnknownRole
from src.employee_portal.employee_portal.roles.hierarchy import (
    ORDERED_ROLES,
    dashboard_route,
    initial_role_options,
    next_role,
    normalize_role,
    rank_of,
)


def test_ranks_follow_hierarchy_order():
    assert [rank_of(r) for r in ORDERED_ROLES] == [0, 1, 2, 3, 4]
    assert rank_of(Role.SUPER_ADMINISTRATOR) == 4


@pytest.mark.parametrize("role", list(Role))
def test_next_role_up_is_higher_or_none_only_at_top(role):
    up = next_role(role, Direction.UP)
    if role == Role.SUPER_ADMINISTRATOR:
        assert up is None
    else:
        assert up is not None
        assert rank_of(up) == rank_of(role) + 1


@pytest.mark.parametrize("role", list(Role))
def test_next_role_down_is_none_only_for_intern(role):
    down = next_role(role, Direction.DOWN)
    assert (down is None) == (role == Role.INTERN)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("super_administrator", Role.SUPER_ADMINISTRATOR),
        ("SUPER_ADMIN", Role.SUPER_ADMINISTRATOR),
        ("Super Administrator", Role.SUPER_ADMINISTRATOR),
        ("ADMIN", Role.ADMINISTRATOR),
        ("Administrator", Role.ADMINISTRATOR),
        (" manager ", Role.MANAGER),
        ("Intern", Role.INTERN),
    ],
)
def test_normalize_role_accepts_legacy_spellings(raw, expected):
    assert normalize_role(raw) == expected


@pytest.mark.parametrize("raw", ["ceo", "", None, 3])
def test_unknown_role_raises(raw):
    with pytest.raises(UnknownRole):
        rank_of(raw)


def test_next_role_rejects_unknown_role():
    with pytest.raises(UnknownRole):
        next_role("janitor", Direction.UP)


def test_dashboard_and_initial_options():
    assert dashboard_route("super_admin") == "/dashboard/super-admin"
    assert initial_role_options() == (Role.INTERN, Role.EMPLOYEE)
