from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Sequence

import structlog

from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..core.enums import DayAvailability
from .identity import EmployeeDateKey, IdentityKey, RecordIdKey, identity_key
from .model import AttendanceRecord, EmployeesStatus, check_invariants

log = structlog.get_logger(__name__)

SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class CachedRecord:
    key: IdentityKey
    record: AttendanceRecord
    seq: int


@dataclass(frozen=True)
class RejectedRecord:
    record: AttendanceRecord
    violations: tuple[str, ...]


@dataclass(frozen=True)
class MergeResult:
    merged: int = 0
    rejected: tuple[RejectedRecord, ...] = field(default_factory=tuple)


def dedupe_by_day(entries: Iterable[CachedRecord]) -> list[CachedRecord]:
    """Keep one entry per (employee, date).

    Id-keyed entries win over (employee, date)-keyed ones; among equals the
    most recently merged entry wins.
    """

    best: dict[tuple[str, date], CachedRecord] = {}
    for entry in entries:
        day_key = entry.record.day_key
        current = best.get(day_key)
        if current is None or _rank(entry) > _rank(current):
            best[day_key] = entry
    return list(best.values())


def _rank(entry: CachedRecord) -> tuple[int, int]:
    return (1 if isinstance(entry.key, RecordIdKey) else 0, entry.seq)


class AttendanceStore:
    """Session-scoped attendance cache.

    Holds the current user's today record and history, and (for admins) the
    employees-status snapshot. Every history mutation goes through merge().
    One store is built per session and emptied with reset() on logout.
    """

    def __init__(self, *, snapshot_path: Optional[Path] = None):
        self._lock = threading.RLock()
        self._snapshot_path = Path(snapshot_path) if snapshot_path else None
        self._entries: dict[IdentityKey, CachedRecord] = {}
        self._ordered: list[AttendanceRecord] = []
        self._seq = 0
        self._day_availability: dict[tuple[str, date], DayAvailability] = {}
        self.today: Optional[AttendanceRecord] = None
        self.employees_status: Optional[EmployeesStatus] = None
        self.error: Optional[str] = None
        self.initialized = False

    # ----- reads -----

    @property
    def history(self) -> list[AttendanceRecord]:
        """Cached records, one per (employee, date), newest date first."""
        with self._lock:
            return list(self._ordered)

    def entries(self) -> list[CachedRecord]:
        with self._lock:
            return list(self._entries.values())

    def for_day(self, employee_id: str, day: date) -> Optional[AttendanceRecord]:
        with self._lock:
            matches = [e for e in self._entries.values() if e.record.day_key == (employee_id, day)]
            if not matches:
                return None
            return dedupe_by_day(matches)[0].record

    def availability(self, employee_id: str, day: date) -> Optional[DayAvailability]:
        with self._lock:
            return self._day_availability.get((employee_id, day))

    def unknown_days(self, employee_id: str) -> set[date]:
        with self._lock:
            return {d for (emp, d), a in self._day_availability.items() if emp == employee_id and a == DayAvailability.UNKNOWN}

    # ----- writes -----

    def merge(self, records: Sequence[AttendanceRecord]) -> MergeResult:
        """Merge a batch by identity key; the incoming record wins on conflict.

        Merging the same batch twice leaves the same content as merging it once.
        """

        rejected: list[RejectedRecord] = []
        merged = 0
        with self._lock:
            for record in records:
                violations = check_invariants(record)
                if violations:
                    rejected.append(RejectedRecord(record=record, violations=tuple(violations)))
                    log.warning(
                        "record_rejected",
                        record_id=record.id,
                        employee_id=record.employee_id,
                        day=format_iso_date(record.date),
                        violations=violations,
                    )
                    continue

                key = identity_key(record)
                if isinstance(key, RecordIdKey):
                    # A server id supersedes the date-keyed placeholder of the same day.
                    self._entries.pop(EmployeeDateKey(record.employee_id, record.date), None)
                self._seq += 1
                self._entries[key] = CachedRecord(key=key, record=record, seq=self._seq)
                self._day_availability[record.day_key] = DayAvailability.PRESENT
                merged += 1

                if self.today is not None and self.today.day_key == record.day_key:
                    if self.today.id is None or record.id is None or self.today.id == record.id:
                        self.today = record

            self._reorder()
            self.initialized = True
            self._persist()
        return MergeResult(merged=merged, rejected=tuple(rejected))

    def apply_action_result(self, record: AttendanceRecord) -> None:
        """Replace the day's record with what the server returned for an action."""
        with self._lock:
            self.today = record
            self.merge([record])

    def set_today(self, record: Optional[AttendanceRecord]) -> None:
        """Replace the today record; one that breaks the record invariants is dropped."""
        with self._lock:
            if record is None:
                self.today = None
                self._persist()
                return
            result = self.merge([record])
            if not result.rejected:
                self.today = record
                self._persist()

    def set_employees_status(self, status: EmployeesStatus) -> None:
        with self._lock:
            self.employees_status = status
            self._persist()

    def mark_days(self, employee_id: str, days: Iterable[date], availability: DayAvailability) -> None:
        """Record fetch outcomes; a loaded record is never downgraded."""
        with self._lock:
            for day in days:
                key = (employee_id, day)
                if availability != DayAvailability.PRESENT and self._day_availability.get(key) == DayAvailability.PRESENT:
                    continue
                self._day_availability[key] = availability

    def set_error(self, message: Optional[str]) -> None:
        self.error = message

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()
            self._ordered = []
            self._seq = 0
            self._day_availability.clear()
            self.today = None
            self.employees_status = None
            self.error = None
            self.initialized = False
            if self._snapshot_path is not None and self._snapshot_path.exists():
                self._snapshot_path.unlink()
        log.info("attendance_cache_reset")

    def _reorder(self) -> None:
        deduped = dedupe_by_day(self._entries.values())
        deduped.sort(key=lambda e: (e.record.date, e.seq), reverse=True)
        self._ordered = [e.record for e in deduped]

    # ----- persistence -----

    def snapshot(self) -> dict:
        with self._lock:
            ordered = sorted(self._entries.values(), key=lambda e: e.seq)
            return {
                "version": SNAPSHOT_VERSION,
                "today": self.today.to_payload() if self.today else None,
                "records": [e.record.to_payload() for e in ordered],
                "employees_status": self.employees_status.to_payload() if self.employees_status else None,
                "unknown_days": [
                    {"employee": emp, "date": format_iso_date(d)}
                    for (emp, d), a in self._day_availability.items()
                    if a == DayAvailability.UNKNOWN
                ],
            }

    def restore(self, data: dict) -> None:
        if data.get("version") != SNAPSHOT_VERSION:
            log.warning("snapshot_version_mismatch", version=data.get("version"))
            return
        with self._lock:
            path, self._snapshot_path = self._snapshot_path, None
            try:
                self.merge([AttendanceRecord.from_payload(r) for r in data.get("records") or []])
                today = data.get("today")
                self.today = AttendanceRecord.from_payload(today) if today else None
                status = data.get("employees_status")
                self.employees_status = EmployeesStatus.from_payload(status) if status else None
                for item in data.get("unknown_days") or []:
                    self.mark_days(str(item["employee"]), [parse_iso_date(item["date"])], DayAvailability.UNKNOWN)
            finally:
                self._snapshot_path = path

    def _persist(self) -> None:
        if self._snapshot_path is not None:
            save_snapshot(self, self._snapshot_path)


def save_snapshot(store: AttendanceStore, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(store.snapshot()), encoding="utf-8")
    tmp.replace(path)


def load_snapshot(path: Path, *, persist: bool = True) -> AttendanceStore:
    """Build a store from a snapshot file; a missing file gives an empty store."""
    path = Path(path)
    store = AttendanceStore(snapshot_path=path if persist else None)
    if path.exists():
        store.restore(json.loads(path.read_text(encoding="utf-8")))
    return store
