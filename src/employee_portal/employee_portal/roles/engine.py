"""Role transitions: promote, demote, and Super Administrator handover.

Order of side effects per call:

1. profile store (authoritative; must succeed)
2. identity-provider metadata (advisory)
3. notifications and audit log (advisory)

Advisory failures come back as warnings on the result and never undo step 1.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from ..audit.model import AuditEntry
from ..audit.repository import AuditRepository
from ..common.datetime_utils import iso_now
from ..common.validators import require_int
from ..core.enums import Direction, NotificationType, Role, TransitionAction
from ..core.exceptions import (
    ActorNotFound,
    DomainError,
    InfrastructureError,
    InsufficientPermission,
    InvalidTransition,
    NoFurtherTransition,
    PartialTransferFailure,
    TargetNotFound,
    TransitionConflict,
)
from ..employees.model import EmployeeProfile
from ..employees.repository import EmployeeRepository
from ..identity.mirror import IdentityMetadataMirror
from ..notifications.repository import NotificationRepository
from .hierarchy import display_name, next_role, normalize_role, rank_of
from .model import (
    AUDIT_FAILED,
    METADATA_MIRROR_FAILED,
    NOTIFICATION_FAILED,
    TransitionOutcome,
    TransitionRequest,
    TransitionResult,
    TransitionWarning,
)
from .permissions import PermissionPolicy

logger = logging.getLogger(__name__)


class RoleTransitionEngine:
    def __init__(
        self,
        employees: EmployeeRepository,
        mirror: IdentityMetadataMirror,
        notifications: NotificationRepository,
        audit: Optional[AuditRepository] = None,
        *,
        policy: Optional[PermissionPolicy] = None,
        notify_actor: bool = True,
    ):
        self._employees = employees
        self._mirror = mirror
        self._notifications = notifications
        self._audit = audit
        self._policy = policy or PermissionPolicy()
        self._notify_actor = notify_actor

        self._locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Caller-facing API
    # ------------------------------------------------------------------

    def apply_transition(
        self,
        acting_external_id: str,
        target_profile_id: int,
        action,
        explicit_new_role=None,
    ) -> TransitionOutcome:
        """Run one transition and fold domain errors into the outcome.

        Infrastructure errors (store unavailable) are not domain errors and propagate.
        """
        try:
            request = self.build_request(acting_external_id, target_profile_id, action, explicit_new_role)
            return TransitionOutcome.success(self.execute(request))
        except DomainError as e:
            if not isinstance(e, PartialTransferFailure):
                logger.info("Role transition rejected: %s (%s)", e.code, e)
            return TransitionOutcome.failure(e)

    @staticmethod
    def build_request(acting_external_id, target_profile_id, action, explicit_new_role=None) -> TransitionRequest:
        try:
            action = TransitionAction(action)
        except ValueError:
            raise InvalidTransition(f"Invalid action: {action!r}") from None
        explicit = normalize_role(explicit_new_role) if explicit_new_role not in (None, "") else None
        return TransitionRequest(
            acting_external_id=str(acting_external_id),
            target_profile_id=require_int(target_profile_id, "targetProfileId"),
            action=action,
            explicit_new_role=explicit,
        )

    def execute(self, request: TransitionRequest) -> TransitionResult:
        actor = self._employees.find_by_external_id(request.acting_external_id)
        if not actor:
            raise ActorNotFound("Acting user not found")

        if request.action == TransitionAction.TRANSFER_SUPER_ADMIN:
            return self._transfer_super_admin(actor, request)
        return self._step(actor, request)

    # ------------------------------------------------------------------
    # Promote / demote
    # ------------------------------------------------------------------

    def _step(self, actor: EmployeeProfile, request: TransitionRequest) -> TransitionResult:
        # The version read here is the token for the write below: if anything
        # changed the target in between, this call conflicts instead of stacking.
        target = self._employees.find_by_id(request.target_profile_id)
        if not target:
            raise TargetNotFound("Target user not found")

        new_role = self._determine_new_role(target, request.action, request.explicit_new_role)

        if not self._policy.can_perform_action(actor.role, target.role, request.action, new_role):
            raise InsufficientPermission(
                f"{display_name(actor.role)} cannot {request.action.value} "
                f"{display_name(target.role)} to {display_name(new_role)}"
            )

        if new_role == target.role:
            return TransitionResult(new_role=new_role, changed=False)

        with self._locked(target.profile_id):
            updated = self._employees.update_role(
                target.profile_id,
                new_role,
                position=display_name(new_role),
                expected_version=target.version,
            )
            if updated is None:
                raise TransitionConflict("Target was modified concurrently; reload and retry")

        logger.info(
            "Role %s: profile=%s %s -> %s by profile=%s",
            request.action.value,
            target.profile_id,
            target.role.value,
            new_role.value,
            actor.profile_id,
        )

        warnings: List[TransitionWarning] = []
        self._mirror_role(updated, warnings)

        promoted = request.action == TransitionAction.PROMOTE
        verb = "promoted" if promoted else "demoted"
        self._notify(
            updated.profile_id,
            NotificationType.PROMOTION if promoted else NotificationType.DEMOTION,
            f"You have been {verb} from {display_name(target.role)} to {display_name(new_role)} by {actor.name}.",
            warnings,
        )
        if self._notify_actor and rank_of(actor.role) >= rank_of(Role.MANAGER):
            self._notify(
                actor.profile_id,
                NotificationType.ROLE_CHANGE_CONFIRMATION,
                f"You {verb} {target.name} from {display_name(target.role)} to {display_name(new_role)}.",
                warnings,
            )
        self._record_audit(actor, target, new_role, request.action, warnings)

        return TransitionResult(new_role=new_role, changed=True, warnings=tuple(warnings))

    @staticmethod
    def _determine_new_role(
        target: EmployeeProfile,
        action: TransitionAction,
        explicit: Optional[Role],
    ) -> Role:
        direction = Direction.UP if action == TransitionAction.PROMOTE else Direction.DOWN

        if explicit is None:
            new_role = next_role(target.role, direction)
            if new_role is None:
                raise NoFurtherTransition(f"Cannot {action.value} {display_name(target.role)} further")
            return new_role

        if explicit == target.role:
            return explicit
        if direction == Direction.UP and rank_of(explicit) < rank_of(target.role):
            raise InvalidTransition(f"{display_name(explicit)} is not a promotion from {display_name(target.role)}")
        if direction == Direction.DOWN and rank_of(explicit) > rank_of(target.role):
            raise InvalidTransition(f"{display_name(explicit)} is not a demotion from {display_name(target.role)}")
        return explicit

    # ------------------------------------------------------------------
    # Super Administrator handover
    # ------------------------------------------------------------------

    def _transfer_super_admin(self, actor: EmployeeProfile, request: TransitionRequest) -> TransitionResult:
        if request.explicit_new_role not in (None, Role.SUPER_ADMINISTRATOR):
            raise InvalidTransition("A transfer always targets the Super Administrator role")

        target = self._employees.find_by_id(request.target_profile_id)
        if not target:
            raise TargetNotFound("Target user not found")

        if not self._policy.can_transfer_super_admin(actor.role):
            raise InsufficientPermission("Only the Super Administrator can transfer the role")
        if target.profile_id == actor.profile_id:
            raise InvalidTransition("Cannot transfer the Super Administrator role to yourself")

        with self._locked(actor.profile_id, target.profile_id):
            # Both rows must still match what the permission check saw.
            # Neither write is attempted otherwise.
            current_actor = self._employees.find_by_id(actor.profile_id)
            current_target = self._employees.find_by_id(target.profile_id)
            if (
                current_actor is None
                or current_actor.version != actor.version
                or current_target is None
                or current_target.version != target.version
            ):
                raise TransitionConflict("Super Administrator or target was modified concurrently; reload and retry")

            demoted = self._employees.update_role(
                actor.profile_id,
                Role.ADMINISTRATOR,
                position=display_name(Role.ADMINISTRATOR),
                expected_version=actor.version,
            )
            if demoted is None:
                raise TransitionConflict("Super Administrator profile was modified concurrently")

            try:
                promoted = self._employees.update_role(
                    target.profile_id,
                    Role.SUPER_ADMINISTRATOR,
                    position=display_name(Role.SUPER_ADMINISTRATOR),
                    expected_version=target.version,
                )
                if promoted is None:
                    raise TransitionConflict("Target was modified concurrently")
            except (DomainError, InfrastructureError) as e:
                logger.critical(
                    "PARTIAL SUPER ADMIN TRANSFER: profile=%s demoted to administrator but profile=%s "
                    "was not promoted; no Super Administrator exists until fixed manually: %s",
                    actor.profile_id,
                    target.profile_id,
                    e,
                )
                raise PartialTransferFailure(
                    "Super Administrator was demoted but the new one could not be promoted",
                    demoted_profile_id=actor.profile_id,
                    target_profile_id=target.profile_id,
                ) from e

        logger.info(
            "Super Administrator transferred: profile=%s -> profile=%s",
            actor.profile_id,
            target.profile_id,
        )

        warnings: List[TransitionWarning] = []
        self._mirror_role(demoted, warnings)
        self._mirror_role(promoted, warnings)

        self._notify(
            promoted.profile_id,
            NotificationType.ROLE_TRANSFER,
            f"{actor.name} transferred the Super Administrator role to you.",
            warnings,
        )
        self._notify(
            demoted.profile_id,
            NotificationType.ROLE_TRANSFER,
            f"You transferred the Super Administrator role to {target.name}; your role is now Administrator.",
            warnings,
        )
        self._record_audit(actor, target, Role.SUPER_ADMINISTRATOR, request.action, warnings)

        return TransitionResult(new_role=Role.SUPER_ADMINISTRATOR, changed=True, warnings=tuple(warnings))

    # ------------------------------------------------------------------
    # Advisory side effects
    # ------------------------------------------------------------------

    def _mirror_role(self, profile: EmployeeProfile, warnings: List[TransitionWarning]) -> None:
        metadata = {
            "role": profile.role.value,
            "roleSetupComplete": True,
            "databaseUserId": profile.profile_id,
            "lastRoleUpdate": iso_now(),
        }
        try:
            self._mirror.set_metadata(profile.external_id, metadata)
        except Exception as e:
            logger.warning("Identity metadata mirror failed for profile=%s: %s", profile.profile_id, e)
            warnings.append(
                TransitionWarning(
                    code=METADATA_MIRROR_FAILED,
                    message=f"Role saved, but identity metadata was not updated for {profile.name}",
                    profile_id=profile.profile_id,
                )
            )

    def _notify(
        self,
        recipient_id: int,
        type: NotificationType,
        message: str,
        warnings: List[TransitionWarning],
    ) -> None:
        try:
            self._notifications.create(recipient_id=recipient_id, message=message, type=type)
        except Exception as e:
            logger.warning("Notification for profile=%s failed: %s", recipient_id, e)
            warnings.append(
                TransitionWarning(
                    code=NOTIFICATION_FAILED,
                    message="Role saved, but a notification could not be created",
                    profile_id=recipient_id,
                )
            )

    def _record_audit(
        self,
        actor: EmployeeProfile,
        target: EmployeeProfile,
        new_role: Role,
        action: TransitionAction,
        warnings: List[TransitionWarning],
    ) -> None:
        if self._audit is None:
            return
        entry = AuditEntry(
            actor_id=actor.profile_id,
            actor_role=actor.role.value,
            action="ROLE_CHANGE",
            resource="EMPLOYEE",
            resource_id=str(target.profile_id),
            details={
                "old_role": target.role.value,
                "new_role": new_role.value,
                "transition": action.value,
            },
        )
        try:
            self._audit.record(entry)
        except Exception as e:
            logger.warning("Audit log for profile=%s failed: %s", target.profile_id, e)
            warnings.append(
                TransitionWarning(
                    code=AUDIT_FAILED,
                    message="Role saved, but the audit entry could not be written",
                    profile_id=target.profile_id,
                )
            )

    # ------------------------------------------------------------------
    # Per-target serialization
    # ------------------------------------------------------------------

    def _lock_for(self, profile_id: int) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(profile_id)
            if lock is None:
                lock = self._locks[profile_id] = threading.Lock()
            return lock

    @contextmanager
    def _locked(self, *profile_ids: int) -> Iterator[None]:
        # Fixed order so two transfers over the same pair cannot deadlock.
        locks = [self._lock_for(pid) for pid in sorted(set(int(p) for p in profile_ids))]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()
