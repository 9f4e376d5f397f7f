"""Administrator-created and administrator-edited attendance records."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from attendance_api.exceptions import NotFoundError, StorageConflict, ValidationError
from attendance_api.models.attendance import (
    AttendanceEntry,
    AttendanceStatus,
    AttendanceUpdate,
    ManualAttendanceCreate,
)
from attendance_api.services.attendance_store import AttendanceStore
from attendance_api.services.clock import Clock
from attendance_api.services.directory import EmployeeDirectory

logger = logging.getLogger(__name__)


def _check_interval(clock_in: Optional[datetime], clock_out: Optional[datetime]) -> None:
    if clock_in is not None and clock_out is not None and clock_out < clock_in:
        raise ValidationError("Clock-out time cannot be earlier than clock-in time")


class ManualEntryService:
    def __init__(self, store: AttendanceStore, employees: EmployeeDirectory, clock: Clock):
        self._store = store
        self._employees = employees
        self._clock = clock

    async def create(self, data: ManualAttendanceCreate, *, admin_id: str) -> AttendanceEntry:
        if await self._employees.find_by_id(data.employee_id) is None:
            raise NotFoundError("Employee not found")

        clock_in = self._clock.localize(data.clock_in)
        clock_out = self._clock.localize(data.clock_out) if data.clock_out else None
        _check_interval(clock_in, clock_out)

        start, end = self._clock.day_bounds(self._clock.start_of_day(data.date))
        if await self._store.find_for_day(data.employee_id, start, end) is not None:
            raise ValidationError("Attendance record already exists for this date")

        entry = AttendanceEntry(
            employee_id=data.employee_id,
            date=start,
            clock_in=clock_in,
            clock_out=clock_out,
            status=data.status or AttendanceStatus.PRESENT,
            notes=data.notes or "",
            is_manual_entry=True,
            edited_by=admin_id,
        )
        try:
            created = await self._store.insert(entry)
        except StorageConflict as e:
            raise ValidationError("Attendance record already exists for this date") from e
        logger.info(f"Admin {admin_id} created attendance {created.id} for employee {data.employee_id}")
        return created

    async def edit(self, record_id: str, data: AttendanceUpdate, *, admin_id: str) -> AttendanceEntry:
        record = await self._store.get(record_id)
        if record is None:
            raise NotFoundError("Attendance record not found")

        changes: dict = {"is_manual_entry": True, "edited_by": admin_id}
        if data.clock_in is not None:
            changes["clock_in"] = self._clock.localize(data.clock_in)
        if data.clock_out is not None:
            changes["clock_out"] = self._clock.localize(data.clock_out)
        if data.status is not None:
            changes["status"] = data.status
        if data.notes is not None:
            changes["notes"] = data.notes

        edited = record.model_copy(update=changes)
        _check_interval(edited.clock_in, edited.clock_out)
        saved = await self._store.update(edited.with_total_hours())
        logger.info(f"Admin {admin_id} edited attendance {record_id}")
        return saved
