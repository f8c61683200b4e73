from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "invalid_input"


class AuthenticationError(DomainError):
    """Raised when the caller cannot be identified."""

    code = "unauthenticated"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"


class NotFoundError(DomainError):
    code = "not_found"


class ConflictError(DomainError):
    code = "conflict"


# Role transitions


class ActorNotFound(NotFoundError):
    code = "actor_not_found"


class TargetNotFound(NotFoundError):
    code = "target_not_found"


class UnknownRole(ValidationError):
    code = "unknown_role"

    def __init__(self, value: object):
        super().__init__(f"Unknown role: {value!r}")
        self.value = value


class NoFurtherTransition(ValidationError):
    code = "no_further_transition"


class InvalidTransition(ValidationError):
    code = "invalid_transition"


class InsufficientPermission(AuthorizationError):
    code = "insufficient_permission"


class TransitionConflict(ConflictError):
    """The target profile changed between read and write."""

    code = "transition_conflict"


class PartialTransferFailure(DomainError):
    """Outgoing Super Administrator was demoted but the incoming one was not promoted.

    Leaves the system with no Super Administrator; needs manual correction.
    """

    code = "partial_transfer_failure"

    def __init__(self, message: str, *, demoted_profile_id: int, target_profile_id: int):
        super().__init__(message)
        self.demoted_profile_id = demoted_profile_id
        self.target_profile_id = target_profile_id


# Onboarding


class SetupUnavailable(ValidationError):
    code = "setup_unavailable"


class AlreadyRegistered(ValidationError):
    code = "already_registered"

    def __init__(self, message: str, *, current_role: Optional[str] = None):
        super().__init__(message)
        self.current_role = current_role


class InfrastructureError(Exception):
    """Store or transport failure; not part of the domain taxonomy."""


class StoreUnavailable(InfrastructureError):
    pass
