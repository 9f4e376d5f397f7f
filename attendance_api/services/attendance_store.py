"""Attendance persistence: the store contract and its MongoDB implementation."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Protocol

from beanie import PydanticObjectId, UpdateResponse
from beanie.operators import Inc, Set
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError, PyMongoError

from attendance_api.exceptions import StorageConflict, StorageUnavailable
from attendance_api.models.attendance import AttendanceEntry, AttendanceRecord

logger = logging.getLogger(__name__)


class AttendanceStore(Protocol):
    async def find_for_day(self, employee_id: str, start: datetime, end: datetime) -> Optional[AttendanceEntry]:
        """Record of employee_id whose date lies in [start, end)."""

    async def get(self, record_id: str) -> Optional[AttendanceEntry]:
        ...

    async def insert(self, entry: AttendanceEntry) -> AttendanceEntry:
        """Create a record; StorageConflict if the employee already has one that day."""

    async def update(self, entry: AttendanceEntry) -> AttendanceEntry:
        """Replace the mutable fields if entry.version is still current, else StorageConflict."""


def _object_id(value: str) -> Optional[PydanticObjectId]:
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError):
        return None


class BeanieAttendanceStore:
    """AttendanceStore on the `attendances` collection.

    Inserts rely on the unique (employee_id, date) index; updates are a single
    find-and-update filtered on the record version, so two racing writers
    cannot both succeed.
    """

    async def find_for_day(self, employee_id: str, start: datetime, end: datetime) -> Optional[AttendanceEntry]:
        try:
            record = await AttendanceRecord.find_one(
                {"employee_id": employee_id, "date": {"$gte": start, "$lt": end}}
            )
        except PyMongoError as e:
            logger.error(f"Attendance lookup failed for employee {employee_id}: {e}")
            raise StorageUnavailable("Attendance store unavailable") from e
        return record.to_entry() if record else None

    async def get(self, record_id: str) -> Optional[AttendanceEntry]:
        oid = _object_id(record_id)
        if oid is None:
            return None
        try:
            record = await AttendanceRecord.get(oid)
        except PyMongoError as e:
            logger.error(f"Attendance fetch failed for record {record_id}: {e}")
            raise StorageUnavailable("Attendance store unavailable") from e
        return record.to_entry() if record else None

    async def insert(self, entry: AttendanceEntry) -> AttendanceEntry:
        record = AttendanceRecord.from_entry(entry.with_total_hours().model_copy(update={"version": 0}))
        try:
            await record.insert()
        except DuplicateKeyError as e:
            raise StorageConflict(
                f"Attendance for employee {entry.employee_id} on {entry.date.date()} already exists"
            ) from e
        except PyMongoError as e:
            logger.error(f"Attendance insert failed for employee {entry.employee_id}: {e}")
            raise StorageUnavailable("Attendance store unavailable") from e
        return record.to_entry()

    async def update(self, entry: AttendanceEntry) -> AttendanceEntry:
        oid = _object_id(entry.id) if entry.id else None
        if oid is None:
            raise StorageConflict("Cannot update an attendance record that was never stored")
        entry = entry.with_total_hours()
        fields = entry.model_dump(include={
            "clock_in", "clock_out", "total_hours", "status", "is_manual_entry", "edited_by", "notes",
        })
        fields["updated_at"] = datetime.utcnow()
        try:
            updated = await AttendanceRecord.find_one(
                {"_id": oid, "version": entry.version}
            ).update(
                Set(fields),
                Inc({"version": 1}),
                response_type=UpdateResponse.NEW_DOCUMENT,
            )
        except PyMongoError as e:
            logger.error(f"Attendance update failed for record {entry.id}: {e}")
            raise StorageUnavailable("Attendance store unavailable") from e
        if updated is None:
            raise StorageConflict(f"Attendance record {entry.id} was modified concurrently")
        return updated.to_entry()
