from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from types import ModuleType
from typing import Callable, Optional

import structlog

from .attendance.gateway import AttendanceGateway
from .attendance.http_gateway import HttpAttendanceGateway
from .attendance.state_machine import AttendanceStateMachine
from .attendance.store import AttendanceStore, load_snapshot
from .common.datetime_utils import today_local
from .core.constants import (
    DAYS_PER_PAGE,
    DEFAULT_EXPECTED_DAILY_HOURS,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_WEEKLY_TARGET_HOURS,
)
from .core.enums import Role
from .reports.aggregator import HoursAggregator
from .reports.coordinator import RangeFetchCoordinator

log = structlog.get_logger(__name__)

GatewayFactory = Callable[[ModuleType, str], AttendanceGateway]


@dataclass(frozen=True)
class Employee:
    employee_id: str
    name: str = ""
    role: Role = Role.EMPLOYEE
    expected_daily_hours: Optional[float] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class Container:
    employee: Employee

    gateway: AttendanceGateway
    store: AttendanceStore

    state_machine: AttendanceStateMachine
    coordinator: RangeFetchCoordinator
    aggregator: HoursAggregator

    window_size: int
    weekly_target_hours: float
    clock: Callable[[], date]


def http_gateway_factory(settings: ModuleType, token: str) -> AttendanceGateway:
    return HttpAttendanceGateway(
        base_url=str(getattr(settings, "API_BASE_URL")),
        token=token,
        auth_scheme=str(getattr(settings, "AUTH_SCHEME", "Bearer")),
        prefix=str(getattr(settings, "TIME_SHEETS_PREFIX", "/time_sheets")),
        timeout=float(getattr(settings, "REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
    )


def build_container(
    *,
    settings: ModuleType,
    token: str,
    employee: Employee,
    gateway_factory: Optional[GatewayFactory] = None,
    clock: Callable[[], date] = today_local,
) -> Container:
    gateway = (gateway_factory or http_gateway_factory)(settings, token)

    snapshot_dir = getattr(settings, "CACHE_SNAPSHOT_DIR", None)
    if snapshot_dir:
        store = load_snapshot(Path(snapshot_dir) / f"{employee.employee_id}.json")
    else:
        store = AttendanceStore()

    window_size = int(getattr(settings, "DAYS_PER_PAGE", DAYS_PER_PAGE))
    daily_hours = employee.expected_daily_hours or float(
        getattr(settings, "EXPECTED_DAILY_HOURS", DEFAULT_EXPECTED_DAILY_HOURS)
    )

    return Container(
        employee=employee,
        gateway=gateway,
        store=store,
        state_machine=AttendanceStateMachine(gateway, store, clock=clock),
        coordinator=RangeFetchCoordinator(
            gateway,
            store,
            employee_id=employee.employee_id,
            window_size=window_size,
            clock=clock,
        ),
        aggregator=HoursAggregator(expected_daily_hours=daily_hours),
        window_size=window_size,
        weekly_target_hours=float(getattr(settings, "WEEKLY_TARGET_HOURS", DEFAULT_WEEKLY_TARGET_HOURS)),
        clock=clock,
    )


class SessionRegistry:
    """Live containers keyed by dashboard session id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._containers: dict[str, Container] = {}

    def open(self, session_key: str, container: Container) -> Container:
        with self._lock:
            previous = self._containers.pop(session_key, None)
            self._containers[session_key] = container
        if previous is not None and previous.employee.employee_id != container.employee.employee_id:
            previous.store.reset()
        log.info("session_opened", employee_id=container.employee.employee_id, role=container.employee.role.value)
        return container

    def get(self, session_key: Optional[str]) -> Optional[Container]:
        if not session_key:
            return None
        with self._lock:
            return self._containers.get(session_key)

    def close(self, session_key: Optional[str]) -> bool:
        if not session_key:
            return False
        with self._lock:
            container = self._containers.pop(session_key, None)
        if container is None:
            return False
        container.store.reset()
        log.info("session_closed", employee_id=container.employee.employee_id)
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._containers)
