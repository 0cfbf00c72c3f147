from __future__ import annotations

from datetime import date

from src.attendance_dashboard.attendance_dashboard.core.enums import DayAvailability, WindowKind
from src.attendance_dashboard.attendance_dashboard.reports.aggregator import HoursAggregator
from src.attendance_dashboard.attendance_dashboard.reports.calculator.standard_calculator import (
    StandardHoursCalculator,
)
from src.attendance_dashboard.attendance_dashboard.reports.windows import ReportWindow

WEEK = ReportWindow(kind=WindowKind.WEEK, anchor=date(2024, 1, 7))


def test_break_is_subtracted(make_record):
    record = make_record(clock_in="09:00", clock_out="17:00", break_start="12:00", break_end="12:30")
    assert StandardHoursCalculator().worked_hours(record) == 7.5


def test_open_day_counts_zero(make_record):
    assert StandardHoursCalculator().worked_hours(make_record(clock_in="09:00")) == 0.0


def test_hours_round_to_one_decimal(make_record):
    record = make_record(clock_in="09:00", clock_out="16:20")
    assert StandardHoursCalculator().worked_hours(record) == 7.3


def test_long_break_never_goes_negative(make_record):
    record = make_record(clock_in="09:00", clock_out="10:00", break_start="08:00", break_end="11:00")
    assert StandardHoursCalculator().worked_hours(record) == 0.0


def test_week_points_cover_every_day(make_record):
    records = [
        make_record(date(2024, 1, 2), id="b", clock_out="17:00", break_start="12:00", break_end="12:30"),
        make_record(date(2024, 1, 5), id="e"),
    ]

    points = HoursAggregator().aggregate(records, WEEK, employee_id="emp-1")

    assert [p.date.day for p in points] == [1, 2, 3, 4, 5, 6, 7]
    assert [p.worked_hours for p in points] == [0.0, 7.5, 0.0, 0.0, 0.0, 0.0, 0.0]
    assert all(p.capacity_hours == 8.0 for p in points)
    assert points[1].label == "02 Jan"


def test_missing_day_gives_zero_not_error():
    points = HoursAggregator().aggregate([], WEEK, employee_id="emp-1")
    assert sum(p.worked_hours for p in points) == 0.0


def test_capacity_comes_from_expected_hours(make_record):
    points = HoursAggregator(expected_daily_hours=6).aggregate([], WEEK)
    assert points[0].capacity_hours == 6.0
    assert points[0].remaining_hours == 6.0


def test_stacked_values_cap_at_capacity(make_record):
    record = make_record(date(2024, 1, 3), id="c", clock_in="08:00", clock_out="18:00")
    point = HoursAggregator().aggregate([record], WEEK)[2]

    assert point.worked_hours == 10.0
    assert point.filled_hours == 8.0
    assert point.remaining_hours == 0.0


def test_duplicate_day_prefers_id_record(make_record):
    with_id = make_record(date(2024, 1, 3), id="c", clock_in="09:00", clock_out="17:00")
    without_id = make_record(date(2024, 1, 3), id=None, clock_in="09:00", clock_out="12:00")

    hours = HoursAggregator().daily_hours([with_id, without_id], employee_id="emp-1")
    assert hours == {date(2024, 1, 3): 8.0}


def test_duplicate_day_falls_back_to_latest(make_record):
    first = make_record(date(2024, 1, 3), id=None, clock_in="09:00", clock_out="12:00")
    latest = make_record(date(2024, 1, 3), id=None, clock_in="09:00", clock_out="13:00")

    hours = HoursAggregator().daily_hours([first, latest])
    assert hours == {date(2024, 1, 3): 4.0}


def test_other_employees_are_filtered_out(make_record):
    mine = make_record(date(2024, 1, 3), id="a", clock_out="17:00")
    theirs = make_record(date(2024, 1, 3), id="b", employee_id="emp-2", clock_out="12:00")

    assert HoursAggregator().daily_hours([mine, theirs], employee_id="emp-1") == {date(2024, 1, 3): 8.0}


def test_without_filter_hours_are_summed_per_day(make_record):
    mine = make_record(date(2024, 1, 3), id="a", clock_out="17:00")
    theirs = make_record(date(2024, 1, 3), id="b", employee_id="emp-2", clock_out="12:00")

    assert HoursAggregator().daily_hours([mine, theirs]) == {date(2024, 1, 3): 11.0}


def test_unknown_days_still_count_zero_but_are_marked(make_record):
    availability = {date(2024, 1, 3): DayAvailability.UNKNOWN, date(2024, 1, 4): DayAvailability.ABSENT}
    points = HoursAggregator().aggregate([], WEEK, availability=availability)

    assert points[2].worked_hours == 0.0
    assert points[2].availability == DayAvailability.UNKNOWN
    assert points[3].availability == DayAvailability.ABSENT
    assert points[0].availability is None


def test_total_worked_hours(make_record):
    records = [
        make_record(date(2024, 1, 2), id="a", clock_out="17:00"),
        make_record(date(2024, 1, 3), id="b", clock_out="13:30"),
        make_record(date(2024, 1, 4), id="c"),
    ]
    assert HoursAggregator().total_worked_hours(records) == 12.5
