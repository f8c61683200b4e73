from __future__ import annotations

import pytest

from src.employee_portal.employee_portal.core.enums import Role
from src.employee_portal.employee_portal.core.exceptions import (
    ActorNotFound,
    AlreadyRegistered,
    InsufficientPermission,
    SetupUnavailable,
    TargetNotFound,
    UnknownRole,
    ValidationError,
)
from src.employee_portal.employee_portal.employees.service import OnboardingService


@pytest.fixture
def service(employees, mirror):
    return OnboardingService(employees, mirror)


def test_first_user_becomes_super_administrator(service, employees, mirror):
    assert service.is_first_user() is True

    result = service.setup_first_user(external_id="user_1", name="Ada Lovelace", email="ada@example.com")

    assert result.profile.role == Role.SUPER_ADMINISTRATOR
    assert result.profile.position == "System Administrator"
    assert result.metadata_synced is True
    assert service.is_first_user() is False

    external_id, metadata = mirror.calls[0]
    assert external_id == "user_1"
    assert metadata["role"] == "super_administrator"
    assert metadata["isFirstUser"] is True
    assert metadata["roleSetupComplete"] is True


def test_first_user_setup_only_once(service):
    service.setup_first_user(external_id="user_1")

    with pytest.raises(SetupUnavailable):
        service.setup_first_user(external_id="user_2")


def test_first_user_setup_survives_mirror_outage(employees):
    class DownMirror:
        def set_metadata(self, external_id, metadata):
            raise ConnectionError("identity provider down")

    result = OnboardingService(employees, DownMirror()).setup_first_user(external_id="user_1")

    assert result.metadata_synced is False
    assert employees.role_of(result.profile.profile_id) == Role.SUPER_ADMINISTRATOR


@pytest.mark.parametrize("selected, expected", [("intern", Role.INTERN), ("Employee", Role.EMPLOYEE)])
def test_register_user_with_allowed_role(service, selected, expected, mirror):
    result = service.register_user(external_id="user_9", selected_role=selected, name="Grace")

    assert result.profile.role == expected
    assert result.profile.position == expected.value.title()
    assert "isFirstUser" not in mirror.calls[0][1]


@pytest.mark.parametrize("selected", ["manager", "administrator", "super_admin"])
def test_register_user_cannot_pick_elevated_role(service, employees, selected):
    with pytest.raises(ValidationError):
        service.register_user(external_id="user_9", selected_role=selected)
    assert employees.count() == 0


def test_register_user_rejects_unknown_role(service):
    with pytest.raises(UnknownRole):
        service.register_user(external_id="user_9", selected_role="wizard")


def test_register_user_twice(service):
    service.register_user(external_id="user_9", selected_role="intern")

    with pytest.raises(AlreadyRegistered) as exc:
        service.register_user(external_id="user_9", selected_role="employee")
    assert exc.value.current_role == "intern"


def test_status_reports_dashboard(service):
    assert service.status("nobody").registered is False
    assert service.status("nobody").is_first_user is True

    service.register_user(external_id="user_9", selected_role="employee")
    status = service.status("user_9")

    assert status.registered is True
    assert status.role == Role.EMPLOYEE
    assert status.dashboard == "/dashboard/employee"


def test_list_profiles_requires_administrator(service, employees):
    employees.add("admin", Role.ADMINISTRATOR)
    employees.add("mgr", Role.MANAGER)

    assert len(service.list_profiles(external_id="admin")) == 2
    with pytest.raises(InsufficientPermission):
        service.list_profiles(external_id="mgr")
    with pytest.raises(ActorNotFound):
        service.list_profiles(external_id="ghost")


def test_resync_own_metadata_from_stored_role(service, employees, mirror):
    emp = employees.add("emp", Role.MANAGER)

    result = service.resync_metadata(external_id="emp")

    assert result.metadata_synced is True
    assert result.profile.profile_id == emp.profile_id
    [(external_id, metadata)] = mirror.calls
    assert external_id == "emp"
    assert metadata["role"] == "manager"
    assert metadata["roleSetupComplete"] is True
    assert metadata["databaseUserId"] == emp.profile_id
    assert "lastRoleUpdate" in metadata


def test_resync_other_user_requires_role_management(service, employees, mirror):
    employees.add("admin", Role.ADMINISTRATOR)
    employees.add("mgr", Role.MANAGER)
    worker = employees.add("worker", Role.INTERN)

    with pytest.raises(InsufficientPermission):
        service.resync_metadata(external_id="mgr", target_profile_id=worker.profile_id)
    assert mirror.calls == []

    result = service.resync_metadata(external_id="admin", target_profile_id=worker.profile_id)
    assert mirror.calls[0][0] == "worker"
    assert result.profile.role == Role.INTERN

    with pytest.raises(TargetNotFound):
        service.resync_metadata(external_id="admin", target_profile_id=999)


def test_resync_reports_mirror_outage(employees):
    employees.add("emp", Role.EMPLOYEE)

    class DownMirror:
        def set_metadata(self, external_id, metadata):
            raise ConnectionError("identity provider down")

    assert OnboardingService(employees, DownMirror()).resync_metadata(external_id="emp").metadata_synced is False
