from __future__ import annotations

from typing import FrozenSet, Optional

from ..core.enums import Direction, Role, TransitionAction
from ..core.exceptions import UnknownRole
from .hierarchy import ORDERED_ROLES, next_role, normalize_role, rank_of

# Capabilities each role adds on top of the roles below it.
_OWN_PERMISSIONS = {
    Role.INTERN: frozenset(
        {
            "view_assigned_tasks",
            "submit_timesheets",
            "request_promotion",
            "receive_notifications",
        }
    ),
    Role.EMPLOYEE: frozenset(
        {
            "manage_personal_tasks",
            "view_team_calendar",
            "participate_projects",
            "team_collaboration",
        }
    ),
    Role.MANAGER: frozenset(
        {
            "assign_tasks",
            "manage_projects",
            "approve_leave_requests",
            "view_team_performance",
            "promote_demote_team",
        }
    ),
    Role.ADMINISTRATOR: frozenset(
        {
            "manage_roles",
            "configure_policies",
            "access_all_statistics",
            "system_configuration",
        }
    ),
    Role.SUPER_ADMINISTRATOR: frozenset(
        {
            "promote_demote_admins",
            "transfer_super_admin",
            "security_settings",
        }
    ),
}


class PermissionPolicy:
    """Decides who may promote, demote or hand over the Super Administrator seat.

    Pure: no I/O, no state. Unknown roles are denied, never raised.
    """

    def can_perform_action(
        self,
        acting_role,
        target_role,
        action: TransitionAction,
        new_role=None,
    ) -> bool:
        try:
            action = TransitionAction(action)
        except ValueError:
            return False

        if action == TransitionAction.TRANSFER_SUPER_ADMIN:
            return self.can_transfer_super_admin(acting_role)

        try:
            acting_rank = rank_of(acting_role)
            target_rank = rank_of(target_role)
            if new_role is None:
                direction = Direction.UP if action == TransitionAction.PROMOTE else Direction.DOWN
                resulting = next_role(target_role, direction)
            else:
                resulting = normalize_role(new_role)
        except UnknownRole:
            return False

        if resulting is None:
            return False

        return acting_rank > target_rank and acting_rank > rank_of(resulting)

    def can_transfer_super_admin(self, acting_role) -> bool:
        try:
            return normalize_role(acting_role) == Role.SUPER_ADMINISTRATOR
        except UnknownRole:
            return False


def permissions_for(role) -> FrozenSet[str]:
    """All capabilities of a role, including those inherited from lower ranks."""
    rank = rank_of(role)
    granted: set[str] = set()
    for r in ORDERED_ROLES[: rank + 1]:
        granted |= _OWN_PERMISSIONS[r]
    return frozenset(granted)


def has_permission(role, permission: str) -> bool:
    try:
        return permission in permissions_for(role)
    except UnknownRole:
        return False


def lowest_role_with(permission: str) -> Optional[Role]:
    for role in ORDERED_ROLES:
        if permission in _OWN_PERMISSIONS[role]:
            return role
    return None
