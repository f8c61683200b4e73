from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Canonical roles, lowest to highest rank."""

    INTERN = "intern"
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMINISTRATOR = "administrator"
    SUPER_ADMINISTRATOR = "super_administrator"


class TransitionAction(str, Enum):
    PROMOTE = "promote"
    DEMOTE = "demote"
    TRANSFER_SUPER_ADMIN = "transfer_super_admin"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


class NotificationType(str, Enum):
    """Notification kinds emitted by role transitions."""

    PROMOTION = "PROMOTION"
    DEMOTION = "DEMOTION"
    ROLE_TRANSFER = "ROLE_TRANSFER"
    ROLE_CHANGE_CONFIRMATION = "ROLE_CHANGE_CONFIRMATION"
