from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for dashboard permissions."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Server-confirmed status of an attendance record."""

    IN = "IN"
    IN_BREAK = "IN_BREAK"
    OUT = "OUT"

    @classmethod
    def parse(cls, value: str | None) -> "AttendanceStatus":
        # The API spells the break status "IN BREAK".
        normalized = (value or "OUT").strip().upper().replace(" ", "_")
        return cls(normalized)


class DayState(str, Enum):
    """Where an employee-day sits in the clock-in/break/clock-out cycle."""

    NOT_STARTED = "NOT_STARTED"
    CLOCKED_IN = "CLOCKED_IN"
    ON_BREAK = "ON_BREAK"
    CLOCKED_OUT = "CLOCKED_OUT"


class ActionState(str, Enum):
    """Per-action progress flags reported by the today endpoint."""

    DONE = "DONE"
    UNSOLVED = "UNSOLVED"


class AttendanceAction(str, Enum):
    CLOCK_IN = "clock_in"
    START_BREAK = "start_break"
    END_BREAK = "end_break"
    CLOCK_OUT = "clock_out"


class WindowKind(str, Enum):
    WEEK = "week"
    MONTH = "month"


class DayAvailability(str, Enum):
    """Outcome of fetching one calendar day.

    PRESENT: a record was loaded. ABSENT: the server confirmed there is no
    record. UNKNOWN: the fetch failed, so zero hours for that day are not
    confirmed.
    """

    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"
