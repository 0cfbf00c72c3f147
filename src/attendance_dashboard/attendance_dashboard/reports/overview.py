from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..attendance.model import ActionStates, AttendanceRecord, EmployeesStatus, TodayTimeSheet
from ..common.datetime_utils import format_timestamp, round_hours
from ..core.constants import DEFAULT_RECENT_STATUS_LIMIT
from ..core.enums import ActionState, AttendanceStatus
from .aggregator import ChartPoint


def percent(part: float, whole: float) -> int:
    if whole <= 0:
        return 0
    value = Decimal(str(part / whole * 100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(value)


@dataclass(frozen=True)
class TimeOverview:
    worked_hours: float
    target_hours: float
    percentage: int
    remaining_hours: float
    is_clocked_in: bool
    is_on_break: bool

    def to_payload(self) -> dict:
        return {
            "worked_hours": self.worked_hours,
            "target_hours": self.target_hours,
            "percentage": self.percentage,
            "remaining_hours": self.remaining_hours,
            "is_clocked_in": self.is_clocked_in,
            "is_on_break": self.is_on_break,
        }


def build_time_overview(
    points: list[ChartPoint],
    *,
    target_hours: float,
    today: Optional[AttendanceRecord] = None,
) -> TimeOverview:
    """Progress of closed-day hours in a window against a target."""

    worked = round_hours(sum(p.worked_hours for p in points))
    return TimeOverview(
        worked_hours=worked,
        target_hours=float(target_hours),
        percentage=min(percent(worked, target_hours), 100),
        remaining_hours=round_hours(max(target_hours - worked, 0.0)),
        is_clocked_in=bool(today and today.clock_in and not today.clock_out),
        is_on_break=bool(today and today.break_start and not today.break_end),
    )


@dataclass(frozen=True)
class ActivityEntry:
    label: str
    started_at: Optional[str]
    ended_at: Optional[str]
    completed: bool
    active: bool


def today_activity(sheet: TodayTimeSheet) -> list[ActivityEntry]:
    """Punch-in, break and punch-out timeline for the today widget."""
    record = sheet.record
    states = sheet.states or ActionStates()
    if record is None:
        return [
            ActivityEntry("Punch in", None, None, states.clock_in == ActionState.DONE, False),
            ActivityEntry("Break", None, None, states.break_ == ActionState.DONE, False),
            ActivityEntry("Punch out", None, None, states.clock_out == ActionState.DONE, False),
        ]
    return [
        ActivityEntry(
            "Punch in",
            format_timestamp(record.clock_in),
            None,
            states.clock_in == ActionState.DONE,
            record.clock_out is None and record.break_start is None,
        ),
        ActivityEntry(
            "Break",
            format_timestamp(record.break_start),
            format_timestamp(record.break_end),
            states.break_ == ActionState.DONE,
            record.status == AttendanceStatus.IN_BREAK,
        ),
        ActivityEntry(
            "Punch out",
            format_timestamp(record.clock_out),
            None,
            states.clock_out == ActionState.DONE,
            False,
        ),
    ]


@dataclass(frozen=True)
class StatusSummary:
    in_count: int
    in_break: int
    out: int
    total: int
    absent: int
    present: int
    present_percentage: int
    active_percentage: int
    recent: list[dict]


def summarize_employees_status(status: EmployeesStatus, *, recent_limit: int = DEFAULT_RECENT_STATUS_LIMIT) -> StatusSummary:
    present = max(status.total - status.absent, 0)
    recent = sorted(
        status.recent,
        key=lambda r: r.last_modified.timestamp() if r.last_modified else 0.0,
        reverse=True,
    )
    return StatusSummary(
        in_count=status.in_count,
        in_break=status.in_break,
        out=status.out,
        total=status.total,
        absent=status.absent,
        present=present,
        present_percentage=percent(present, status.total),
        active_percentage=percent(status.in_count + status.in_break, status.total),
        recent=[
            {
                "employee": r.employee_id,
                "name": r.employee_name,
                "status": r.status.value,
                "image_url": r.employee_image_url,
                "last_modified": format_timestamp(r.last_modified),
            }
            for r in recent[:recent_limit]
        ],
    )
