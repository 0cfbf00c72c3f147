from __future__ import annotations

from dataclasses import asdict

from flask import Flask, jsonify, request

from ..common.validators import require_non_negative_int
from ..common.web import admin_required, current_container, login_required
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import WindowKind
from ..core.exceptions import GatewayError, RecordIntegrityError, ValidationError
from ..reports.overview import build_time_overview, summarize_employees_status, today_activity
from ..reports.windows import ReportWindow
from .model import TodayTimeSheet


def _record_payload(record):
    return record.to_payload() if record else None


def _today_payload(container, sheet: TodayTimeSheet | None = None):
    machine = container.state_machine
    record = machine.today
    sheet = sheet or TodayTimeSheet(record=record)
    return {
        "record": _record_payload(record),
        "state": machine.state.value,
        "actions": machine.actions.to_payload(),
        "states": sheet.states.to_payload(),
        "activity": [asdict(entry) for entry in today_activity(sheet)],
    }


def _page_arg() -> int:
    return require_non_negative_int(request.args.get("page", 0), "page")


def register(app: Flask) -> None:
    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    async def attendance_today():
        container = current_container()
        sheet = None
        try:
            sheet = await container.state_machine.refresh_today()
        except (GatewayError, RecordIntegrityError):
            # Keep the cached record; the error flag tells the view it is stale.
            pass
        payload = _today_payload(container, sheet)
        payload["error"] = container.store.error
        return jsonify(payload)

    actions = {
        "clock-in": ("clock_in", "Clocked in successfully"),
        "start-break": ("start_break", "Break started"),
        "end-break": ("end_break", "Break ended"),
        "toggle-break": ("toggle_break", "Break updated"),
        "clock-out": ("clock_out", "Clocked out successfully"),
    }

    @app.route("/api/attendance/<action>", methods=["POST"], endpoint="attendance_action")
    @login_required
    async def attendance_action(action: str):
        if action not in actions:
            raise ValidationError(f"Unknown attendance action: {action}")
        method_name, message = actions[action]

        container = current_container()
        data = request.get_json(silent=True) or {}
        record = await getattr(container.state_machine, method_name)(data.get("note"))

        payload = _today_payload(container)
        payload.update({"success": True, "message": message, "result": _record_payload(record)})
        return jsonify(payload)

    @app.route("/api/attendance/chart", methods=["GET"], endpoint="attendance_chart")
    @login_required
    async def attendance_chart():
        container = current_container()
        kind = (request.args.get("kind") or WindowKind.WEEK.value).lower()
        window = ReportWindow(
            kind=kind,
            anchor=container.clock(),
            page_offset=_page_arg(),
            window_size=container.window_size,
        )

        if window.kind == WindowKind.MONTH:
            load = await container.coordinator.load_window(window)
        else:
            load = await container.coordinator.load_page(window.page_offset)

        points = container.aggregator.aggregate(
            container.store.history,
            window,
            employee_id=container.employee.employee_id,
            availability=load.availability,
        )
        return jsonify(
            {
                "kind": window.kind.value,
                "page": window.page_offset,
                "range": window.label,
                "points": [p.to_payload() for p in points],
                "failed_days": [d.isoformat() for d in load.failed_days],
                "error": container.store.error,
            }
        )

    @app.route("/api/attendance/overview", methods=["GET"], endpoint="attendance_overview")
    @login_required
    async def attendance_overview():
        container = current_container()
        window = ReportWindow(
            kind=WindowKind.WEEK,
            anchor=container.clock(),
            page_offset=_page_arg(),
            window_size=container.window_size,
        )
        await container.coordinator.load_page(window.page_offset)
        points = container.aggregator.aggregate(
            container.store.history,
            window,
            employee_id=container.employee.employee_id,
        )
        overview = build_time_overview(
            points,
            target_hours=container.weekly_target_hours,
            today=container.state_machine.today,
        )
        payload = overview.to_payload()
        payload["error"] = container.store.error
        return jsonify(payload)

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    async def attendance_history():
        container = current_container()
        limit = require_non_negative_int(request.args.get("limit", DEFAULT_HISTORY_LIMIT), "limit")
        records = container.store.history[:limit]
        return jsonify({"records": [r.to_payload() for r in records], "error": container.store.error})

    @app.route("/api/org/status", methods=["GET"], endpoint="org_status")
    @admin_required
    async def org_status():
        container = current_container()
        try:
            status = await container.gateway.fetch_employees_status()
            container.store.set_employees_status(status)
        except GatewayError as e:
            container.store.set_error(e.message)
            status = container.store.employees_status
            if status is None:
                raise
        return jsonify({**asdict(summarize_employees_status(status)), "error": container.store.error})

    @app.route("/api/org/stats", methods=["GET"], endpoint="org_stats")
    @admin_required
    async def org_stats():
        container = current_container()
        status = container.store.employees_status
        return jsonify(
            {
                "worked_hours": container.aggregator.total_worked_hours(container.store.history),
                "absent": status.absent if status else 0,
            }
        )
