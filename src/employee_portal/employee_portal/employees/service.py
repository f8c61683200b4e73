from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.datetime_utils import iso_now, utc_now
from ..common.validators import require_non_empty
from ..core.constants import FIRST_USER_POSITION
from ..core.enums import Role
from ..core.exceptions import (
    ActorNotFound,
    AlreadyRegistered,
    InsufficientPermission,
    SetupUnavailable,
    TargetNotFound,
    ValidationError,
)
from ..identity.mirror import IdentityMetadataMirror
from ..roles.hierarchy import dashboard_route, display_name, initial_role_options, normalize_role
from ..roles.permissions import has_permission, lowest_role_with
from .model import EmployeeProfile
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserStatus:
    registered: bool
    is_first_user: bool
    role: Optional[Role] = None
    dashboard: Optional[str] = None


@dataclass(frozen=True)
class OnboardingResult:
    profile: EmployeeProfile
    metadata_synced: bool


class OnboardingService:
    """Use case: first-user bootstrap and self-registration."""

    def __init__(self, employees: EmployeeRepository, mirror: IdentityMetadataMirror):
        self._employees = employees
        self._mirror = mirror

    def is_first_user(self) -> bool:
        return self._employees.count() == 0

    def user_count(self) -> int:
        return self._employees.count()

    def status(self, external_id: str) -> UserStatus:
        profile = self._employees.find_by_external_id(external_id)
        if not profile:
            return UserStatus(registered=False, is_first_user=self.is_first_user())
        return UserStatus(
            registered=True,
            is_first_user=False,
            role=profile.role,
            dashboard=dashboard_route(profile.role),
        )

    def setup_first_user(self, *, external_id: str, name: str = "", email: str = "") -> OnboardingResult:
        external_id = require_non_empty(external_id, "User id")

        # Empty-store check and insert happen in the store under one lock.
        profile = self._employees.create(
            external_id=external_id,
            name=(name or "").strip() or "Super Admin",
            email=(email or "").strip() or "admin@company.com",
            role=Role.SUPER_ADMINISTRATOR,
            position=FIRST_USER_POSITION,
            hire_date=utc_now().date(),
            only_if_empty=True,
        )
        if profile is None:
            raise SetupUnavailable("First user setup not available - users already exist")

        logger.info("First user setup complete: profile=%s is Super Administrator", profile.profile_id)
        synced = self._sync_metadata(profile, setupDate=iso_now(), isFirstUser=True)
        return OnboardingResult(profile=profile, metadata_synced=synced)

    def register_user(
        self,
        *,
        external_id: str,
        selected_role,
        name: str = "",
        email: str = "",
    ) -> OnboardingResult:
        external_id = require_non_empty(external_id, "User id")
        role = normalize_role(selected_role)
        if role not in initial_role_options():
            raise ValidationError("New users can only choose between Intern and Employee roles")

        existing = self._employees.find_by_external_id(external_id)
        if existing:
            raise AlreadyRegistered("User already registered", current_role=existing.role.value)

        profile = self._employees.create(
            external_id=external_id,
            name=(name or "").strip() or f"New {display_name(role)}",
            email=(email or "").strip() or "user@company.com",
            role=role,
            position=display_name(role),
            hire_date=utc_now().date(),
        )
        if profile is None:
            # Lost a race with a concurrent registration of the same id.
            raise AlreadyRegistered("User already registered")

        logger.info("User registered: profile=%s role=%s", profile.profile_id, role.value)
        synced = self._sync_metadata(profile, setupDate=iso_now())
        return OnboardingResult(profile=profile, metadata_synced=synced)

    def list_profiles(self, *, external_id: str) -> Sequence[EmployeeProfile]:
        caller = self._employees.find_by_external_id(external_id)
        if not caller:
            raise ActorNotFound("User not found")
        if not has_permission(caller.role, "manage_roles"):
            required = display_name(lowest_role_with("manage_roles"))
            raise InsufficientPermission(f"Role management requires {required} or higher")
        return self._employees.list_all()

    def resync_metadata(self, *, external_id: str, target_profile_id: Optional[int] = None) -> OnboardingResult:
        """Re-send a profile's stored role to the identity provider.

        Repairs a mirror write that failed during a transition. Anyone may resync
        their own profile; resyncing someone else requires role management.
        """
        caller = self._employees.find_by_external_id(external_id)
        if not caller:
            raise ActorNotFound("User not found")

        profile = caller
        if target_profile_id is not None and int(target_profile_id) != caller.profile_id:
            if not has_permission(caller.role, "manage_roles"):
                required = display_name(lowest_role_with("manage_roles"))
                raise InsufficientPermission(f"Syncing another user's role requires {required} or higher")
            profile = self._employees.find_by_id(target_profile_id)
            if not profile:
                raise TargetNotFound("Target user not found")

        synced = self._sync_metadata(profile, lastRoleUpdate=iso_now())
        if synced:
            logger.info("Identity metadata resynced: profile=%s role=%s", profile.profile_id, profile.role.value)
        return OnboardingResult(profile=profile, metadata_synced=synced)

    def _sync_metadata(self, profile: EmployeeProfile, **extra) -> bool:
        metadata = {
            "role": profile.role.value,
            "roleSetupComplete": True,
            "databaseUserId": profile.profile_id,
        }
        metadata.update(extra)
        try:
            self._mirror.set_metadata(profile.external_id, metadata)
            return True
        except Exception as e:
            logger.warning("Identity metadata mirror failed for profile=%s: %s", profile.profile_id, e)
            return False
