from __future__ import annotations

from ...attendance.model import AttendanceRecord
from ...common.datetime_utils import hours_between, round_hours
from .base import HoursCalculator


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: (out - in) - (break end - break start), not below 0.

    A day without clock-out counts 0; no partial-day estimate is made.
    """

    def worked_hours(self, record: AttendanceRecord) -> float:
        if not record.clock_in or not record.clock_out:
            return 0.0
        hours = round_hours(hours_between(record.clock_in, record.clock_out))
        if record.break_start and record.break_end:
            hours -= round_hours(hours_between(record.break_start, record.break_end))
        return round_hours(max(hours, 0.0))
