from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.employee_portal.employee_portal.core.enums import NotificationType, Role
from src.employee_portal.employee_portal.core.exceptions import StoreUnavailable
from src.employee_portal.employee_portal.employees.model import EmployeeProfile
from src.employee_portal.employee_portal.notifications.model import NotificationRecord
from src.employee_portal.employee_portal.roles.engine import RoleTransitionEngine


class InMemoryEmployees:
    def __init__(self):
        self._by_id: dict[int, EmployeeProfile] = {}
        self._next_id = 1
        self._guard = threading.Lock()
        self.update_calls = 0
        # profile ids whose next update_role raises StoreUnavailable
        self.fail_updates_for: set[int] = set()

    def add(self, external_id: str, role: Role, name: Optional[str] = None) -> EmployeeProfile:
        profile = self.create(
            external_id=external_id,
            name=name or external_id.title(),
            email=f"{external_id}@example.com",
            role=role,
            position=role.value,
            hire_date=date(2026, 1, 5),
        )
        return profile

    def find_by_id(self, profile_id):
        return self._by_id.get(int(profile_id))

    def find_by_external_id(self, external_id):
        for p in self._by_id.values():
            if p.external_id == external_id:
                return p
        return None

    def update_role(self, profile_id, role, *, position, expected_version):
        with self._guard:
            self.update_calls += 1
            if int(profile_id) in self.fail_updates_for:
                raise StoreUnavailable("connection lost")
            current = self._by_id.get(int(profile_id))
            if current is None or current.version != expected_version:
                return None
            updated = replace(current, role=role, position=position, version=current.version + 1)
            self._by_id[current.profile_id] = updated
            return updated

    def count(self):
        return len(self._by_id)

    def create(self, *, external_id, name, email, role, position, hire_date, only_if_empty=False):
        with self._guard:
            if only_if_empty and self._by_id:
                return None
            if any(p.external_id == external_id for p in self._by_id.values()):
                return None
            pid = self._next_id
            self._next_id += 1
            profile = EmployeeProfile(
                profile_id=pid,
                external_id=external_id,
                name=name,
                email=email,
                role=role,
                position=position,
                department_id=None,
                hire_date=hire_date,
            )
            self._by_id[pid] = profile
            return profile

    def list_all(self):
        return list(self._by_id.values())

    def role_of(self, profile_id) -> Role:
        return self._by_id[int(profile_id)].role

    def snapshot(self):
        return dict(self._by_id)


class InMemoryNotifications:
    def __init__(self):
        self.records: list[NotificationRecord] = []
        self.fail = False

    def create(self, *, recipient_id, message, type):
        if self.fail:
            raise StoreUnavailable("notifications table locked")
        rec = NotificationRecord(
            notification_id=len(self.records) + 1,
            recipient_id=int(recipient_id),
            message=message,
            type=NotificationType(type),
            read=False,
            created_at=datetime(2026, 3, 1, 9, 0, 0),
        )
        self.records.append(rec)
        return rec.notification_id

    def list_for_recipient(self, *, recipient_id, unread_only=False, limit=50):
        items = [r for r in self.records if r.recipient_id == int(recipient_id)]
        if unread_only:
            items = [r for r in items if not r.read]
        return list(reversed(items))[:limit]

    def for_recipient(self, recipient_id):
        return [r for r in self.records if r.recipient_id == recipient_id]


class InMemoryAudit:
    def __init__(self):
        self.entries = []

    def record(self, entry):
        self.entries.append(entry)
        return len(self.entries)


class RecordingMirror:
    def __init__(self, fail: bool = False):
        self.calls: list[tuple[str, dict]] = []
        self.fail = fail

    def set_metadata(self, external_id, metadata):
        if self.fail:
            raise RuntimeError("identity provider returned 502")
        self.calls.append((external_id, dict(metadata)))


@pytest.fixture
def employees():
    return InMemoryEmployees()


@pytest.fixture
def notifications():
    return InMemoryNotifications()


@pytest.fixture
def audit():
    return InMemoryAudit()


@pytest.fixture
def mirror():
    return RecordingMirror()


@pytest.fixture
def engine(employees, mirror, notifications, audit):
    return RoleTransitionEngine(employees, mirror, notifications, audit)
