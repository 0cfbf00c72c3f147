from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

import structlog

from ..common.datetime_utils import format_iso_date, today_local
from ..common.validators import clean_note
from ..core.enums import AttendanceAction, AttendanceStatus, DayState
from ..core.exceptions import AlreadyClockedIn, NoActiveBreak, NotClockedIn, RecordIntegrityError
from .gateway import AttendanceGateway
from .model import AttendanceRecord, TodayTimeSheet, check_invariants
from .store import AttendanceStore

log = structlog.get_logger(__name__)


def day_state(record: Optional[AttendanceRecord]) -> DayState:
    if record is None or record.clock_in is None:
        return DayState.NOT_STARTED
    if record.clock_out is not None:
        return DayState.CLOCKED_OUT
    if record.status == AttendanceStatus.IN_BREAK:
        return DayState.ON_BREAK
    return DayState.CLOCKED_IN


@dataclass(frozen=True)
class AvailableActions:
    """Which dashboard buttons are enabled for the current day record."""

    clock_in: bool
    break_: bool
    clock_out: bool
    break_ends: bool

    def to_payload(self) -> dict[str, bool]:
        return {
            "clock_in": self.clock_in,
            "break": self.break_,
            "clock_out": self.clock_out,
            "break_ends": self.break_ends,
        }


def available_actions(record: Optional[AttendanceRecord]) -> AvailableActions:
    clocked_in = record is not None and record.clock_in is not None
    open_day = clocked_in and record.clock_out is None
    return AvailableActions(
        clock_in=not clocked_in,
        break_=open_day,
        clock_out=open_day,
        break_ends=open_day and record.status == AttendanceStatus.IN_BREAK,
    )


def plan_clock_out(record: Optional[AttendanceRecord]) -> list[AttendanceAction]:
    """Steps needed to close the day, in the order they must be sent."""
    if record is None or record.clock_in is None or record.clock_out is not None:
        raise NotClockedIn("You have no open clock-in today")
    if record.status == AttendanceStatus.IN_BREAK:
        return [AttendanceAction.END_BREAK, AttendanceAction.CLOCK_OUT]
    return [AttendanceAction.CLOCK_OUT]


class AttendanceStateMachine:
    """Clock-in / break / clock-out actions for the session's employee.

    Preconditions are checked against the cached today record before any
    network call. The cache is only written after the server confirms, and
    the server's record always replaces the cached one.
    """

    def __init__(
        self,
        gateway: AttendanceGateway,
        store: AttendanceStore,
        *,
        clock: Callable[[], date] = today_local,
    ):
        self._gateway = gateway
        self._store = store
        self._clock = clock

    @property
    def today(self) -> Optional[AttendanceRecord]:
        """The cached today record, or None when it belongs to an earlier day."""
        record = self._store.today
        if record is None or record.date != self._clock():
            return None
        return record

    @property
    def state(self) -> DayState:
        return day_state(self.today)

    @property
    def actions(self) -> AvailableActions:
        return available_actions(self.today)

    async def refresh_today(self) -> TodayTimeSheet:
        self._store.set_error(None)
        try:
            sheet = await self._gateway.fetch_today()
        except Exception as e:
            self._store.set_error(getattr(e, "message", None) or str(e))
            raise

        violations = check_invariants(sheet.record) if sheet.record is not None else []
        if violations:
            log.warning("today_record_rejected", record_id=sheet.record.id, violations=violations)
            self._store.set_error("The server returned an inconsistent attendance record")
            raise RecordIntegrityError("The server returned an inconsistent attendance record", violations=violations)

        self._store.set_today(sheet.record)
        return sheet

    async def clock_in(self, note: str | None = None) -> AttendanceRecord:
        record = self.today
        if record is not None and record.clock_in is not None:
            raise AlreadyClockedIn("You have already clocked in today")
        return await self._perform(AttendanceAction.CLOCK_IN, note)

    async def start_break(self, note: str | None = None) -> AttendanceRecord:
        state = self.state
        if state == DayState.ON_BREAK:
            raise NotClockedIn("You are already on a break")
        if state != DayState.CLOCKED_IN:
            raise NotClockedIn("You must be clocked in to start a break")
        return await self._perform(AttendanceAction.START_BREAK, note)

    async def end_break(self, note: str | None = None) -> AttendanceRecord:
        record = self.today
        if record is None or record.status != AttendanceStatus.IN_BREAK:
            raise NoActiveBreak("You have no break in progress")
        return await self._perform(AttendanceAction.END_BREAK, note)

    async def toggle_break(self, note: str | None = None) -> AttendanceRecord:
        if self.state == DayState.ON_BREAK:
            return await self.end_break(note)
        return await self.start_break(note)

    async def clock_out(self, note: str | None = None) -> AttendanceRecord:
        """Close the day, ending an open break first.

        Each step is confirmed before the next is sent, so a failed break end
        never reaches clock-out. Calling again re-plans from the cached record.
        """

        steps = plan_clock_out(self.today)
        record: Optional[AttendanceRecord] = None
        for step in steps:
            step_note = note if step == AttendanceAction.CLOCK_OUT else None
            record = await self._perform(step, step_note)
        return record

    async def _perform(self, action: AttendanceAction, note: str | None) -> AttendanceRecord:
        call = {
            AttendanceAction.CLOCK_IN: self._gateway.clock_in,
            AttendanceAction.START_BREAK: self._gateway.start_break,
            AttendanceAction.END_BREAK: self._gateway.end_break,
            AttendanceAction.CLOCK_OUT: self._gateway.clock_out,
        }[action]

        try:
            record = await call(clean_note(note))
        except Exception as e:
            log.warning("attendance_action_failed", action=action.value, error=str(e))
            raise

        violations = check_invariants(record)
        if violations:
            log.warning("attendance_action_rejected", action=action.value, violations=violations)
            raise RecordIntegrityError("The server returned an inconsistent attendance record", violations=violations)

        self._store.apply_action_result(record)
        log.info(
            "attendance_action_applied",
            action=action.value,
            record_id=record.id,
            day=format_iso_date(record.date),
            status=record.status.value,
        )
        return record
