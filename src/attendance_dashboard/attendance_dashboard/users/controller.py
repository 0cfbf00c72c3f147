from __future__ import annotations

import uuid

from flask import Flask, current_app, jsonify, request, session

from ..common.validators import require_non_empty, require_positive_number
from ..common.datetime_utils import today_local
from ..common.web import CLOCK_EXTENSION, GATEWAY_FACTORY_EXTENSION, SETTINGS_EXTENSION, sessions
from ..container import Employee, build_container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask) -> None:
    @app.route("/api/session", methods=["POST"], endpoint="login")
    async def login():
        """Open a dashboard session for a token issued by the auth service."""

        data = request.get_json(silent=True) or {}
        token = require_non_empty(str(data.get("token") or ""), "token")
        employee_id = require_non_empty(str(data.get("employee_id") or ""), "employee_id")

        try:
            role = Role(str(data.get("role") or Role.EMPLOYEE.value).lower())
        except ValueError:
            raise ValidationError("Unknown role")

        expected_hours = data.get("expected_daily_hours")
        if expected_hours is not None:
            expected_hours = require_positive_number(expected_hours, "expected_daily_hours")

        employee = Employee(
            employee_id=employee_id,
            name=str(data.get("name") or ""),
            role=role,
            expected_daily_hours=expected_hours,
        )
        container = build_container(
            settings=current_app.extensions[SETTINGS_EXTENSION],
            token=token,
            employee=employee,
            gateway_factory=current_app.extensions.get(GATEWAY_FACTORY_EXTENSION),
            clock=current_app.extensions.get(CLOCK_EXTENSION, today_local),
        )

        session_key = session.get("session_key") or uuid.uuid4().hex
        sessions().open(session_key, container)
        session["session_key"] = session_key
        session["employee_id"] = employee.employee_id
        session["role"] = employee.role.value

        return jsonify({"success": True, "employee_id": employee.employee_id, "role": employee.role.value})

    @app.route("/api/session", methods=["DELETE"], endpoint="logout")
    async def logout():
        closed = sessions().close(session.get("session_key"))
        session.clear()
        return jsonify({"success": True, "closed": closed})
