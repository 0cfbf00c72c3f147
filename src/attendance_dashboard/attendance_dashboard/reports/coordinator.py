from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional

import structlog

from ..attendance.gateway import AttendanceGateway
from ..attendance.model import AttendanceRecord
from ..attendance.store import AttendanceStore, MergeResult
from ..common.datetime_utils import format_iso_date, today_local
from ..core.constants import DAYS_PER_PAGE
from ..core.enums import DayAvailability
from ..core.exceptions import ValidationError
from .windows import ReportWindow, days_between, page_range

log = structlog.get_logger(__name__)

SOURCE_RANGE = "range"
SOURCE_DAILY = "daily"


@dataclass(frozen=True)
class PageLoad:
    start: date
    end: date
    source: str
    merged: int = 0
    rejected: int = 0
    failed_days: tuple[date, ...] = ()
    availability: dict[date, DayAvailability] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failed_days


class RangeFetchCoordinator:
    """Fills the store for a window of days.

    Tries one range request; when it fails or comes back empty, falls back to
    one request per day. A failing day is logged and skipped, not fatal.
    """

    def __init__(
        self,
        gateway: AttendanceGateway,
        store: AttendanceStore,
        *,
        employee_id: str,
        window_size: int = DAYS_PER_PAGE,
        clock: Callable[[], date] = today_local,
    ):
        self._gateway = gateway
        self._store = store
        self._employee_id = employee_id
        self._window_size = int(window_size)
        self._clock = clock

    async def load_page(self, page_offset: int = 0) -> PageLoad:
        start, end = page_range(self._clock(), page_offset, self._window_size)
        return await self.load_range(start, end)

    async def load_window(self, window: ReportWindow) -> PageLoad:
        return await self.load_range(window.start, window.end)

    async def load_range(self, start: date, end: date) -> PageLoad:
        if end < start:
            raise ValidationError("end date must be >= start date")

        self._store.set_error(None)
        days = days_between(start, end)
        range_error: Optional[Exception] = None
        try:
            records = list(await self._gateway.fetch_range(start, end))
        except Exception as e:
            range_error = e
            records = []
            log.warning("range_fetch_failed", start=format_iso_date(start), end=format_iso_date(end), error=str(e))

        if records:
            result = self._store.merge(records)
            self._store.mark_days(self._employee_id, days, DayAvailability.ABSENT)
            return PageLoad(
                start=start,
                end=end,
                source=SOURCE_RANGE,
                merged=result.merged,
                rejected=len(result.rejected),
                availability=self._availability(days),
            )

        if range_error is None:
            log.info("range_fetch_empty", start=format_iso_date(start), end=format_iso_date(end))
        return await self._load_day_by_day(start, end, days)

    async def _load_day_by_day(self, start: date, end: date, days: list[date]) -> PageLoad:
        fetched: list[AttendanceRecord] = []
        failed: list[date] = []
        last_error: Optional[Exception] = None

        for day in days:
            try:
                record = await self._gateway.fetch_day(day)
            except Exception as e:
                last_error = e
                failed.append(day)
                log.warning("day_fetch_failed", day=format_iso_date(day), error=str(e))
                continue
            if record is None:
                self._store.mark_days(self._employee_id, [day], DayAvailability.ABSENT)
            else:
                fetched.append(record)

        result = self._store.merge(fetched) if fetched else MergeResult()
        if failed:
            self._store.mark_days(self._employee_id, failed, DayAvailability.UNKNOWN)
        if failed and len(failed) == len(days):
            self._store.set_error(getattr(last_error, "message", None) or str(last_error))

        return PageLoad(
            start=start,
            end=end,
            source=SOURCE_DAILY,
            merged=result.merged,
            rejected=len(result.rejected),
            failed_days=tuple(failed),
            availability=self._availability(days),
        )

    def _availability(self, days: list[date]) -> dict[date, DayAvailability]:
        out = {}
        for day in days:
            state = self._store.availability(self._employee_id, day)
            if state is not None:
                out[day] = state
        return out
