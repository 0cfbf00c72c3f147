from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, EmployeesStatus, TodayTimeSheet


class AttendanceGateway(Protocol):
    """Port to the remote time-sheets API.

    Every method suspends until the remote call resolves. Failures raise
    GatewayError; a missing day (404) is returned as None, not raised.
    """

    async def clock_in(self, note: str = "") -> AttendanceRecord:
        raise NotImplementedError

    async def start_break(self, note: str = "") -> AttendanceRecord:
        raise NotImplementedError

    async def end_break(self, note: str = "") -> AttendanceRecord:
        raise NotImplementedError

    async def clock_out(self, note: str = "") -> AttendanceRecord:
        raise NotImplementedError

    async def fetch_today(self) -> TodayTimeSheet:
        raise NotImplementedError

    async def fetch_range(self, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    async def fetch_day(self, day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    async def fetch_employees_status(self) -> EmployeesStatus:
        raise NotImplementedError
