from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Literal, Union

from .model import AttendanceRecord


@dataclass(frozen=True)
class RecordIdKey:
    value: str
    kind: Literal["id"] = "id"


@dataclass(frozen=True)
class EmployeeDateKey:
    employee_id: str
    date: date
    kind: Literal["employeeDate"] = "employeeDate"


IdentityKey = Union[RecordIdKey, EmployeeDateKey]


def identity_key(record: AttendanceRecord) -> IdentityKey:
    """Resolve the merge key: server id when present, else (employee, date)."""
    if record.id:
        return RecordIdKey(record.id)
    return EmployeeDateKey(record.employee_id, record.date)
