from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .core.constants import DEFAULT_IDENTITY_MIRROR_RETRIES, DEFAULT_IDENTITY_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import OnboardingService
from .identity.mirror import DisabledMetadataMirror, HttpIdentityMetadataMirror, IdentityMetadataMirror
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .roles.engine import RoleTransitionEngine


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    notifications_repo: NotificationRepository
    audit_repo: AuditRepository
    identity_mirror: IdentityMetadataMirror

    role_engine: RoleTransitionEngine
    onboarding_service: OnboardingService
    notification_service: NotificationService


def build_identity_mirror(settings: Mapping[str, Any]) -> IdentityMetadataMirror:
    base_url = settings.get("IDENTITY_API_URL") or ""
    if not base_url:
        return DisabledMetadataMirror()
    return HttpIdentityMetadataMirror(
        base_url=base_url,
        api_key=settings.get("IDENTITY_API_KEY") or "",
        timeout_seconds=float(settings.get("IDENTITY_TIMEOUT_SECONDS", DEFAULT_IDENTITY_TIMEOUT_SECONDS)),
        retries=int(settings.get("IDENTITY_MIRROR_RETRIES", DEFAULT_IDENTITY_MIRROR_RETRIES)),
    )


def wire(
    *,
    employees_repo: EmployeeRepository,
    notifications_repo: NotificationRepository,
    audit_repo: AuditRepository,
    identity_mirror: IdentityMetadataMirror,
    notify_actor: bool = True,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    role_engine = RoleTransitionEngine(
        employees_repo,
        identity_mirror,
        notifications_repo,
        audit_repo,
        notify_actor=notify_actor,
    )
    onboarding_service = OnboardingService(employees_repo, identity_mirror)
    notification_service = NotificationService(notifications_repo, employees_repo)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        notifications_repo=notifications_repo,
        audit_repo=audit_repo,
        identity_mirror=identity_mirror,
        role_engine=role_engine,
        onboarding_service=onboarding_service,
        notification_service=notification_service,
    )


def build_container(*, db_config: dict, settings: Optional[Mapping[str, Any]] = None) -> Container:
    settings = settings or {}
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire(
        employees_repo=MySQLEmployeeRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        identity_mirror=build_identity_mirror(settings),
        notify_actor=bool(settings.get("NOTIFY_ACTOR_ON_TRANSITION", True)),
        conn=conn,
    )
