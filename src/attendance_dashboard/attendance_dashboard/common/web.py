from __future__ import annotations

from functools import wraps

from flask import Flask, current_app, jsonify, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    GatewayError,
    PreconditionError,
    RecordIntegrityError,
    ValidationError,
)

SESSIONS_EXTENSION = "attendance_sessions"
SETTINGS_EXTENSION = "attendance_settings"
GATEWAY_FACTORY_EXTENSION = "attendance_gateway_factory"
CLOCK_EXTENSION = "attendance_clock"


def sessions():
    return current_app.extensions[SESSIONS_EXTENSION]


def current_container():
    container = sessions().get(session.get("session_key"))
    if container is None:
        raise AuthenticationError("Please sign in to continue")
    return container


def login_required(view):
    @wraps(view)
    async def wrapper(*args, **kwargs):
        current_container()
        return await view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    async def wrapper(*args, **kwargs):
        if not current_container().employee.is_admin:
            raise AuthorizationError("You do not have permission to view this page")
        return await view(*args, **kwargs)

    return wrapper


def error_response(message: str, status: int, **extra):
    payload = {"success": False, "message": message}
    payload.update(extra)
    return jsonify(payload), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PreconditionError)
    def handle_precondition(e: PreconditionError):
        return error_response(str(e), 409, error=type(e).__name__)

    @app.errorhandler(ValidationError)
    def handle_validation(e: ValidationError):
        return error_response(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def handle_authentication(e: AuthenticationError):
        return error_response(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def handle_authorization(e: AuthorizationError):
        return error_response(str(e), 403)

    @app.errorhandler(RecordIntegrityError)
    def handle_integrity(e: RecordIntegrityError):
        return error_response(str(e), 502, violations=e.violations)

    @app.errorhandler(GatewayError)
    def handle_gateway(e: GatewayError):
        return error_response(e.message, 502, upstream_status=e.status_code)

    @app.errorhandler(DomainError)
    def handle_domain(e: DomainError):
        return error_response(str(e), 400)
