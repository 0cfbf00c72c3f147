from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Optional

from ..attendance.identity import identity_key
from ..attendance.model import AttendanceRecord
from ..attendance.store import CachedRecord, dedupe_by_day
from ..common.datetime_utils import format_iso_date, round_hours
from ..core.constants import DEFAULT_EXPECTED_DAILY_HOURS
from ..core.enums import DayAvailability
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator
from .windows import ReportWindow


@dataclass(frozen=True)
class ChartPoint:
    """One bar of the hours chart."""

    label: str
    date: date
    worked_hours: float
    capacity_hours: float
    availability: Optional[DayAvailability] = None

    @property
    def filled_hours(self) -> float:
        return min(self.worked_hours, self.capacity_hours)

    @property
    def remaining_hours(self) -> float:
        return round_hours(max(self.capacity_hours - self.worked_hours, 0.0))

    def to_payload(self) -> dict:
        return {
            "label": self.label,
            "date": format_iso_date(self.date),
            "worked_hours": self.worked_hours,
            "capacity_hours": self.capacity_hours,
            "filled_hours": self.filled_hours,
            "remaining_hours": self.remaining_hours,
            "availability": self.availability.value if self.availability else None,
        }


class HoursAggregator:
    def __init__(
        self,
        *,
        calculator: Optional[HoursCalculator] = None,
        expected_daily_hours: float = DEFAULT_EXPECTED_DAILY_HOURS,
    ):
        self._calculator = calculator or StandardHoursCalculator()
        self._expected_daily_hours = float(expected_daily_hours)

    @property
    def calculator(self) -> HoursCalculator:
        return self._calculator

    def worked_hours(self, record: AttendanceRecord) -> float:
        return self._calculator.worked_hours(record)

    def daily_hours(self, records: Iterable[AttendanceRecord], *, employee_id: Optional[str] = None) -> dict[date, float]:
        """Worked hours per date, one record per (employee, date).

        Without employee_id the hours of all employees are summed per date.
        """

        entries = [
            CachedRecord(key=identity_key(r), record=r, seq=i)
            for i, r in enumerate(records)
            if employee_id is None or r.employee_id == employee_id
        ]
        totals: dict[date, float] = defaultdict(float)
        for entry in dedupe_by_day(entries):
            totals[entry.record.date] += self.worked_hours(entry.record)
        return {d: round_hours(h) for d, h in totals.items()}

    def aggregate(
        self,
        records: Iterable[AttendanceRecord],
        window: ReportWindow,
        *,
        employee_id: Optional[str] = None,
        capacity_hours: Optional[float] = None,
        availability: Optional[Mapping[date, DayAvailability]] = None,
    ) -> list[ChartPoint]:
        """Chart points for every day of the window, oldest first.

        Days without a record yield 0 hours.
        """

        capacity = float(capacity_hours if capacity_hours is not None else self._expected_daily_hours)
        hours = self.daily_hours(records, employee_id=employee_id)
        availability = availability or {}

        points = []
        for day in window.days():
            state = availability.get(day)
            if day in hours:
                state = DayAvailability.PRESENT
            points.append(
                ChartPoint(
                    label=day.strftime("%d %b"),
                    date=day,
                    worked_hours=hours.get(day, 0.0),
                    capacity_hours=capacity,
                    availability=state,
                )
            )
        return points

    def total_worked_hours(self, records: Iterable[AttendanceRecord]) -> float:
        return round_hours(sum(self.daily_hours(records).values()))
