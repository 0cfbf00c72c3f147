from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import (
    format_iso_date,
    format_timestamp,
    parse_iso_date,
    parse_timestamp,
)
from ..core.enums import ActionState, AttendanceStatus
from ..core.exceptions import RecordIntegrityError


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    id: Optional[str]
    employee_id: str
    employee_name: str
    date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    status: AttendanceStatus = AttendanceStatus.OUT
    note: Optional[str] = None
    last_modified: Optional[datetime] = None
    employee_image_url: Optional[str] = None

    @property
    def day_key(self) -> tuple[str, date]:
        return (self.employee_id, self.date)

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    @property
    def on_break(self) -> bool:
        return self.status == AttendanceStatus.IN_BREAK

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "AttendanceRecord":
        """Build a record from the time-sheets API JSON shape."""

        try:
            return cls._from_payload(data)
        except (KeyError, TypeError, ValueError) as e:
            raise RecordIntegrityError(f"Malformed attendance record: {e}", violations=[str(e)]) from e

    @classmethod
    def _from_payload(cls, data: dict[str, Any]) -> "AttendanceRecord":
        raw_id = data.get("id")
        employee = data.get("employee", data.get("employee_id"))
        return cls(
            id=str(raw_id) if raw_id not in (None, "") else None,
            employee_id=str(employee) if employee is not None else "",
            employee_name=data.get("employee_name") or "",
            date=parse_iso_date(str(data["date"])[:10]),
            clock_in=parse_timestamp(data.get("clock_in")),
            clock_out=parse_timestamp(data.get("clock_out")),
            break_start=parse_timestamp(data.get("break_start")),
            break_end=parse_timestamp(data.get("break_end")),
            status=AttendanceStatus.parse(data.get("status")),
            note=data.get("note"),
            last_modified=parse_timestamp(data.get("last_modified")),
            employee_image_url=data.get("employee_image"),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "employee": self.employee_id,
            "employee_name": self.employee_name,
            "employee_image": self.employee_image_url,
            "date": format_iso_date(self.date),
            "clock_in": format_timestamp(self.clock_in),
            "clock_out": format_timestamp(self.clock_out),
            "break_start": format_timestamp(self.break_start),
            "break_end": format_timestamp(self.break_end),
            "status": self.status.value,
            "note": self.note,
            "last_modified": format_timestamp(self.last_modified),
        }


def check_invariants(record: AttendanceRecord) -> list[str]:
    """Return the list of broken record invariants (empty when consistent)."""

    problems: list[str] = []
    if record.clock_out is not None:
        if record.clock_in is None:
            problems.append("clock_out set without clock_in")
        elif record.clock_out < record.clock_in:
            problems.append("clock_out before clock_in")
    if record.break_end is not None:
        if record.break_start is None:
            problems.append("break_end set without break_start")
        elif record.break_end < record.break_start:
            problems.append("break_end before break_start")
    if record.status == AttendanceStatus.IN_BREAK:
        if record.break_start is None or record.break_end is not None:
            problems.append("IN_BREAK status without an open break")
    return problems


@dataclass(frozen=True)
class ActionStates:
    clock_in: ActionState = ActionState.UNSOLVED
    break_: ActionState = ActionState.UNSOLVED
    clock_out: ActionState = ActionState.UNSOLVED

    @classmethod
    def from_payload(cls, data: Optional[dict[str, Any]]) -> "ActionStates":
        data = data or {}

        def _state(key: str) -> ActionState:
            value = str(data.get(key) or ActionState.UNSOLVED.value).upper()
            return ActionState.DONE if value == ActionState.DONE.value else ActionState.UNSOLVED

        return cls(clock_in=_state("clock_in"), break_=_state("break"), clock_out=_state("clock_out"))

    def to_payload(self) -> dict[str, str]:
        return {"clock_in": self.clock_in.value, "break": self.break_.value, "clock_out": self.clock_out.value}


@dataclass(frozen=True)
class TodayTimeSheet:
    """Response of the today endpoint: the day record plus action flags."""

    record: Optional[AttendanceRecord]
    states: ActionStates = field(default_factory=ActionStates)

    @classmethod
    def from_payload(cls, data: Optional[dict[str, Any]]) -> "TodayTimeSheet":
        if not data:
            return cls(record=None)
        raw = data.get("record", data.get("time_sheet"))
        record = AttendanceRecord.from_payload(raw) if raw else None
        return cls(record=record, states=ActionStates.from_payload(data.get("states")))


@dataclass(frozen=True)
class EmployeesStatus:
    """Organisation-wide snapshot of who is in, on break or out right now."""

    in_count: int = 0
    in_break: int = 0
    out: int = 0
    total: int = 0
    absent: int = 0
    recent: tuple[AttendanceRecord, ...] = ()

    @classmethod
    def from_payload(cls, data: Optional[dict[str, Any]]) -> "EmployeesStatus":
        data = data or {}
        in_break = data.get("IN_BREAK", data.get("IN BREAK", 0))
        recent = tuple(AttendanceRecord.from_payload(r) for r in data.get("RECENT") or [])
        return cls(
            in_count=int(data.get("IN") or 0),
            in_break=int(in_break or 0),
            out=int(data.get("OUT") or 0),
            total=int(data.get("TOTAL") or 0),
            absent=int(data.get("ABSENT") or 0),
            recent=recent,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "IN": self.in_count,
            "IN_BREAK": self.in_break,
            "OUT": self.out,
            "TOTAL": self.total,
            "ABSENT": self.absent,
            "RECENT": [r.to_payload() for r in self.recent],
        }
