import pytest

from src.employee_portal.employee_portal.core.enums import Direction, Role, TransitionAction
from src.employee_portal.employee_portal.roles.hierarchy import next_role, rank_of
from src.employee_portal.employee_portal.roles.permissions import (
    PermissionPolicy,
    has_permission,
    lowest_role_with,
    permissions_for,
)

policy = PermissionPolicy()


@pytest.mark.parametrize("acting", list(Role))
@pytest.mark.parametrize("target", list(Role))
def test_promote_allowed_iff_actor_outranks_resulting_role(acting, target):
    resulting = next_role(target, Direction.UP)
    expected = resulting is not None and rank_of(acting) > rank_of(resulting)
    assert policy.can_perform_action(acting, target, TransitionAction.PROMOTE) is expected


def test_administrator_cannot_promote_manager_to_administrator():
    assert policy.can_perform_action(Role.ADMINISTRATOR, Role.MANAGER, TransitionAction.PROMOTE) is False


def test_super_administrator_can_promote_manager_to_administrator():
    assert policy.can_perform_action(Role.SUPER_ADMINISTRATOR, Role.MANAGER, TransitionAction.PROMOTE) is True


def test_manager_can_promote_intern_and_demote_employee():
    assert policy.can_perform_action(Role.MANAGER, Role.INTERN, TransitionAction.PROMOTE)
    assert policy.can_perform_action(Role.MANAGER, Role.EMPLOYEE, TransitionAction.DEMOTE)
    assert not policy.can_perform_action(Role.MANAGER, Role.EMPLOYEE, TransitionAction.PROMOTE)


def test_cannot_act_on_equal_or_higher_rank():
    assert not policy.can_perform_action(Role.ADMINISTRATOR, Role.ADMINISTRATOR, TransitionAction.DEMOTE)
    assert not policy.can_perform_action(Role.MANAGER, Role.ADMINISTRATOR, TransitionAction.DEMOTE)


def test_explicit_new_role_is_checked_against_actor_rank():
    assert policy.can_perform_action(
        Role.SUPER_ADMINISTRATOR, Role.INTERN, TransitionAction.PROMOTE, new_role=Role.ADMINISTRATOR
    )
    assert not policy.can_perform_action(
        Role.ADMINISTRATOR, Role.INTERN, TransitionAction.PROMOTE, new_role=Role.ADMINISTRATOR
    )


def test_transfer_only_for_super_administrator():
    for target in Role:
        assert policy.can_perform_action(Role.SUPER_ADMINISTRATOR, target, TransitionAction.TRANSFER_SUPER_ADMIN)
        assert not policy.can_perform_action(Role.ADMINISTRATOR, target, TransitionAction.TRANSFER_SUPER_ADMIN)


@pytest.mark.parametrize(
    "acting, target, action",
    [
        ("ceo", Role.INTERN, TransitionAction.PROMOTE),
        (Role.SUPER_ADMINISTRATOR, "contractor", TransitionAction.DEMOTE),
        (Role.SUPER_ADMINISTRATOR, Role.INTERN, "fire"),
        ("ceo", Role.INTERN, TransitionAction.TRANSFER_SUPER_ADMIN),
    ],
)
def test_unknown_values_are_denied_not_raised(acting, target, action):
    assert policy.can_perform_action(acting, target, action) is False


def test_permissions_are_inherited_upwards():
    assert has_permission(Role.SUPER_ADMINISTRATOR, "submit_timesheets")
    assert has_permission(Role.ADMINISTRATOR, "manage_roles")
    assert not has_permission(Role.MANAGER, "manage_roles")
    assert permissions_for(Role.EMPLOYEE) < permissions_for(Role.MANAGER)
    assert lowest_role_with("manage_roles") == Role.ADMINISTRATOR
    assert has_permission("nobody", "manage_roles") is False
