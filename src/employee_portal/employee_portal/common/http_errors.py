from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..core.constants import CALLER_HEADER
from ..core.exceptions import (
    AlreadyRegistered,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InfrastructureError,
    NotFoundError,
    PartialTransferFailure,
    ValidationError,
)

logger = logging.getLogger(__name__)


def status_for(error: DomainError) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, AuthorizationError):
        return 403
    if isinstance(error, ConflictError):
        return 409
    return 500


def error_body(error: DomainError) -> dict:
    body = {"success": False, "error": str(error), "code": error.code}
    if isinstance(error, PartialTransferFailure):
        body["demotedProfileId"] = error.demoted_profile_id
        body["targetProfileId"] = error.target_profile_id
    if isinstance(error, AlreadyRegistered) and error.current_role:
        body["currentRole"] = error.current_role
    return body


def domain_error_response(error: DomainError):
    return jsonify(error_body(error)), status_for(error)


def current_caller_id() -> str:
    caller = (request.headers.get(CALLER_HEADER) or "").strip()
    if not caller:
        raise AuthenticationError("Unauthorized")
    return caller


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        return domain_error_response(e)

    @app.errorhandler(InfrastructureError)
    def _infrastructure_error(e: InfrastructureError):
        logger.error("Infrastructure failure on %s %s: %s", request.method, request.path, e)
        return jsonify({"success": False, "error": "Service temporarily unavailable", "code": "service_unavailable"}), 503
