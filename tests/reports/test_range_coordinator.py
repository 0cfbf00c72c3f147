from __future__ import annotations

import asyncio
from datetime import date, timedelta

import pytest

from src.attendance_dashboard.attendance_dashboard.attendance.store import AttendanceStore
from src.attendance_dashboard.attendance_dashboard.core.enums import DayAvailability, WindowKind
from src.attendance_dashboard.attendance_dashboard.core.exceptions import GatewayError, ValidationError
from src.attendance_dashboard.attendance_dashboard.reports.coordinator import (
    SOURCE_DAILY,
    SOURCE_RANGE,
    RangeFetchCoordinator,
)
from src.attendance_dashboard.attendance_dashboard.reports.windows import ReportWindow

WEEK_DAYS = [date(2024, 1, 1) + timedelta(days=i) for i in range(7)]


def _coordinator(gateway, store=None, today=date(2024, 1, 7)):
    store = store or AttendanceStore()
    return RangeFetchCoordinator(gateway, store, employee_id="emp-1", clock=lambda: today), store


def _day_fetches(gateway):
    return [c[1] for c in gateway.calls if c[0] == "fetch_day"]


def test_range_success_merges_and_stops(gateway, make_record):
    gateway.range_result = [make_record(date(2024, 1, 2), id="b"), make_record(date(2024, 1, 5), id="e")]
    coordinator, store = _coordinator(gateway)

    load = asyncio.run(coordinator.load_page(0))

    assert gateway.calls == [("fetch_range", date(2024, 1, 1), date(2024, 1, 7))]
    assert load.source == SOURCE_RANGE
    assert load.merged == 2
    assert [r.id for r in store.history] == ["e", "b"]
    assert load.availability[date(2024, 1, 3)] == DayAvailability.ABSENT
    assert load.availability[date(2024, 1, 5)] == DayAvailability.PRESENT


def test_empty_range_falls_back_to_each_day_and_tolerates_failures(gateway, make_record):
    gateway.range_result = []
    for i, day in enumerate(WEEK_DAYS):
        gateway.day_results[day] = make_record(day, id=f"ts-{i}", clock_out="17:00")
    gateway.day_results[date(2024, 1, 3)] = GatewayError("Server error", status_code=500)
    coordinator, store = _coordinator(gateway)

    load = asyncio.run(coordinator.load_page(0))

    assert _day_fetches(gateway) == WEEK_DAYS
    assert load.source == SOURCE_DAILY
    assert load.failed_days == (date(2024, 1, 3),)
    assert not load.complete
    assert len(store.history) == 6
    assert date(2024, 1, 3) not in {r.date for r in store.history}
    assert store.unknown_days("emp-1") == {date(2024, 1, 3)}
    assert store.error is None


def test_range_failure_falls_back_to_each_day(gateway, make_record):
    gateway.range_result = GatewayError("Range not supported", status_code=400)
    gateway.day_results[date(2024, 1, 4)] = make_record(date(2024, 1, 4), id="d")
    coordinator, store = _coordinator(gateway)

    load = asyncio.run(coordinator.load_page(0))

    assert len(_day_fetches(gateway)) == 7
    assert [r.id for r in store.history] == ["d"]
    assert load.availability[date(2024, 1, 2)] == DayAvailability.ABSENT


def test_repeated_loads_do_not_duplicate_rows(gateway, make_record):
    gateway.range_result = [make_record(date(2024, 1, 2), id="b")]
    coordinator, store = _coordinator(gateway)

    asyncio.run(coordinator.load_page(0))
    asyncio.run(coordinator.load_page(0))

    assert len(store.history) == 1


def test_fallback_rows_without_id_merge_with_existing_day(gateway, make_record):
    gateway.range_result = []
    gateway.day_results[date(2024, 1, 2)] = make_record(date(2024, 1, 2), id=None, note="day fetch")
    store = AttendanceStore()
    store.merge([make_record(date(2024, 1, 2), id=None, note="cached")])
    coordinator, _ = _coordinator(gateway, store=store)

    asyncio.run(coordinator.load_page(0))

    assert len(store.history) == 1
    assert store.history[0].note == "day fetch"


def test_page_offset_walks_back_in_fixed_windows(gateway):
    coordinator, _ = _coordinator(gateway)
    gateway.range_result = GatewayError("down")

    asyncio.run(coordinator.load_page(1))

    assert gateway.calls[0] == ("fetch_range", date(2023, 12, 25), date(2023, 12, 31))


def test_whole_page_failure_sets_error_but_keeps_cache(gateway, make_record):
    cached = make_record(date(2024, 1, 2), id="b")
    store = AttendanceStore()
    store.merge([cached])
    gateway.range_result = GatewayError("down")
    for day in WEEK_DAYS:
        gateway.day_results[day] = GatewayError("down")
    coordinator, _ = _coordinator(gateway, store=store)

    load = asyncio.run(coordinator.load_page(0))

    assert len(load.failed_days) == 7
    assert store.error == "down"
    assert store.history == [cached]
    assert store.availability("emp-1", date(2024, 1, 2)) == DayAvailability.PRESENT


def test_load_window_uses_month_bounds(gateway):
    coordinator, _ = _coordinator(gateway)
    gateway.range_result = GatewayError("down")
    window = ReportWindow(kind=WindowKind.MONTH, anchor=date(2024, 2, 10))

    asyncio.run(coordinator.load_window(window))

    assert gateway.calls[0] == ("fetch_range", date(2024, 2, 1), date(2024, 2, 29))
    assert len(_day_fetches(gateway)) == 29


def test_inverted_range_rejected(gateway):
    coordinator, _ = _coordinator(gateway)
    with pytest.raises(ValidationError):
        asyncio.run(coordinator.load_range(date(2024, 1, 7), date(2024, 1, 1)))
