from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta

from ..common.validators import require_non_negative_int
from ..core.constants import DAYS_PER_PAGE
from ..core.enums import WindowKind
from ..core.exceptions import ValidationError


def page_range(anchor: date, page_offset: int, window_size: int = DAYS_PER_PAGE) -> tuple[date, date]:
    """The window_size days ending page_offset * window_size days before anchor."""
    page_offset = require_non_negative_int(page_offset, "page_offset")
    end = anchor - timedelta(days=page_offset * window_size)
    return end - timedelta(days=window_size - 1), end


def days_between(start: date, end: date) -> list[date]:
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


@dataclass(frozen=True)
class ReportWindow:
    """Reporting window descriptor: week or month, paged back from anchor."""

    kind: WindowKind
    anchor: date
    page_offset: int = 0
    window_size: int = DAYS_PER_PAGE

    def __post_init__(self):
        if not isinstance(self.kind, WindowKind):
            try:
                object.__setattr__(self, "kind", WindowKind(str(self.kind).lower()))
            except ValueError:
                raise ValidationError(f"Unknown window kind: {self.kind}")
        object.__setattr__(self, "page_offset", require_non_negative_int(self.page_offset, "page_offset"))
        if self.window_size < 1:
            raise ValidationError("window_size must be >= 1")

    @property
    def reference_day(self) -> date:
        return self.anchor - timedelta(days=self.page_offset * self.window_size)

    @property
    def start(self) -> date:
        if self.kind == WindowKind.MONTH:
            return self.reference_day.replace(day=1)
        return page_range(self.anchor, self.page_offset, self.window_size)[0]

    @property
    def end(self) -> date:
        if self.kind == WindowKind.MONTH:
            ref = self.reference_day
            return ref.replace(day=calendar.monthrange(ref.year, ref.month)[1])
        return self.reference_day

    def days(self) -> list[date]:
        """Days of the window, oldest to newest."""
        return days_between(self.start, self.end)

    @property
    def label(self) -> str:
        return f"{self.start.strftime('%d %b')} - {self.end.strftime('%d %b')}"
