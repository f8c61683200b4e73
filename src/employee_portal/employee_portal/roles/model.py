from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.enums import Role, TransitionAction
from ..core.exceptions import DomainError

METADATA_MIRROR_FAILED = "metadata_mirror_failed"
NOTIFICATION_FAILED = "notification_failed"
AUDIT_FAILED = "audit_failed"


@dataclass(frozen=True)
class TransitionRequest:
    """One promote/demote/transfer call. Built per request, never stored."""

    acting_external_id: str
    target_profile_id: int
    action: TransitionAction
    explicit_new_role: Optional[Role] = None


@dataclass(frozen=True)
class TransitionWarning:
    """Advisory failure: the role change stands, a side effect did not happen."""

    code: str
    message: str
    profile_id: Optional[int] = None


@dataclass(frozen=True)
class TransitionResult:
    new_role: Role
    changed: bool
    warnings: Tuple[TransitionWarning, ...] = ()


@dataclass(frozen=True)
class TransitionOutcome:
    result: Optional[TransitionResult] = None
    error: Optional[DomainError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_code(self) -> Optional[str]:
        return self.error.code if self.error is not None else None

    @classmethod
    def success(cls, result: TransitionResult) -> "TransitionOutcome":
        return cls(result=result)

    @classmethod
    def failure(cls, error: DomainError) -> "TransitionOutcome":
        return cls(error=error)
