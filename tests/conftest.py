from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timezone
from typing import Optional

import pytest

from src.attendance_dashboard.attendance_dashboard.attendance.model import (
    AttendanceRecord,
    EmployeesStatus,
    TodayTimeSheet,
)
from src.attendance_dashboard.attendance_dashboard.core.enums import AttendanceStatus


def _at(day: date, hhmm: Optional[str]) -> Optional[datetime]:
    if not hhmm:
        return None
    hour, minute = (int(p) for p in hhmm.split(":"))
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def build_record(
    day: date = date(2024, 1, 5),
    *,
    id: Optional[str] = "ts-1",
    employee_id: str = "emp-1",
    clock_in: Optional[str] = "09:00",
    clock_out: Optional[str] = None,
    break_start: Optional[str] = None,
    break_end: Optional[str] = None,
    status: Optional[AttendanceStatus] = None,
    note: Optional[str] = None,
    last_modified: Optional[str] = None,
) -> AttendanceRecord:
    if status is None:
        if clock_out or not clock_in:
            status = AttendanceStatus.OUT
        elif break_start and not break_end:
            status = AttendanceStatus.IN_BREAK
        else:
            status = AttendanceStatus.IN
    return AttendanceRecord(
        id=id,
        employee_id=employee_id,
        employee_name="Alice",
        date=day,
        clock_in=_at(day, clock_in),
        clock_out=_at(day, clock_out),
        break_start=_at(day, break_start),
        break_end=_at(day, break_end),
        status=status,
        note=note,
        last_modified=_at(day, last_modified),
    )


class FakeGateway:
    """In-memory stand-in for the remote time-sheets API."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.action_results: dict[str, list] = defaultdict(list)
        self.range_result = []
        self.day_results: dict[date, object] = {}
        self.today_sheet = TodayTimeSheet(record=None)
        self.employees_status = EmployeesStatus()

    def queue(self, action: str, *results) -> None:
        self.action_results[action].extend(results)

    def _act(self, action: str, note: str):
        self.calls.append((action, note))
        result = self.action_results[action].pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def clock_in(self, note: str = ""):
        return self._act("clock_in", note)

    async def start_break(self, note: str = ""):
        return self._act("start_break", note)

    async def end_break(self, note: str = ""):
        return self._act("end_break", note)

    async def clock_out(self, note: str = ""):
        return self._act("clock_out", note)

    async def fetch_today(self):
        self.calls.append(("fetch_today",))
        if isinstance(self.today_sheet, Exception):
            raise self.today_sheet
        return self.today_sheet

    async def fetch_range(self, start: date, end: date):
        self.calls.append(("fetch_range", start, end))
        if isinstance(self.range_result, Exception):
            raise self.range_result
        return list(self.range_result)

    async def fetch_day(self, day: date):
        self.calls.append(("fetch_day", day))
        result = self.day_results.get(day)
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_employees_status(self):
        self.calls.append(("fetch_employees_status",))
        if isinstance(self.employees_status, Exception):
            raise self.employees_status
        return self.employees_status


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def fixed_today() -> date:
    return date(2024, 1, 7)
