import datetime as dt
from enum import Enum
from typing import Optional

from beanie import Document, Insert, Replace, Save, SaveChanges, before_event
from pydantic import BaseModel, ConfigDict, Field
from pymongo import ASCENDING, IndexModel

from attendance_api.services.duration import compute_total_hours


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half-day"


class AttendanceEntry(BaseModel):
    """Storage-independent attendance record for one employee and one day."""

    id: Optional[str] = None
    employee_id: str
    date: dt.datetime  # local midnight of the workday
    clock_in: Optional[dt.datetime] = None
    clock_out: Optional[dt.datetime] = None
    total_hours: float = 0
    status: AttendanceStatus = AttendanceStatus.PRESENT
    is_manual_entry: bool = False
    edited_by: Optional[str] = None
    notes: str = ""
    version: int = 0

    @property
    def is_logged_in(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    def with_total_hours(self) -> "AttendanceEntry":
        return self.model_copy(update={"total_hours": compute_total_hours(self.clock_in, self.clock_out)})

    def public(self) -> dict:
        data = self.model_dump(exclude={"version"})
        data["is_logged_in"] = self.is_logged_in
        return data


class AttendanceRecord(Document):
    """Attendance document; at most one per (employee_id, date)."""

    employee_id: str
    date: dt.datetime
    clock_in: dt.datetime
    clock_out: Optional[dt.datetime] = None
    total_hours: float = 0
    status: AttendanceStatus = AttendanceStatus.PRESENT
    is_manual_entry: bool = False
    edited_by: Optional[str] = None
    notes: str = ""
    version: int = 0
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
    updated_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)

    @before_event(Insert, Replace, Save, SaveChanges)
    def _derive_total_hours(self):
        self.total_hours = compute_total_hours(self.clock_in, self.clock_out)
        self.updated_at = dt.datetime.utcnow()

    def to_entry(self) -> AttendanceEntry:
        return AttendanceEntry(
            id=str(self.id),
            employee_id=self.employee_id,
            date=self.date,
            clock_in=self.clock_in,
            clock_out=self.clock_out,
            total_hours=self.total_hours,
            status=self.status,
            is_manual_entry=self.is_manual_entry,
            edited_by=self.edited_by,
            notes=self.notes,
            version=self.version,
        )

    @classmethod
    def from_entry(cls, entry: AttendanceEntry) -> "AttendanceRecord":
        return cls(**entry.model_dump(exclude={"id"}))

    class Settings:
        name = "attendances"
        use_state_management = True
        indexes = [
            IndexModel(
                [("employee_id", ASCENDING), ("date", ASCENDING)],
                unique=True,
                name="employee_date_unique",
            ),
        ]


class SessionDescriptor(BaseModel):
    """Result of a login reconciliation."""

    clock_in: Optional[dt.datetime]
    clock_out: Optional[dt.datetime]
    is_logged_in: bool
    session_start_time: Optional[dt.datetime]
    is_continuation: bool

    @classmethod
    def from_entry(cls, entry: AttendanceEntry, *, is_continuation: bool) -> "SessionDescriptor":
        return cls(
            clock_in=entry.clock_in,
            clock_out=entry.clock_out,
            is_logged_in=entry.clock_out is None,
            session_start_time=entry.clock_in,
            is_continuation=is_continuation,
        )


class ManualAttendanceCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")
    employee_id: str
    date: dt.date
    clock_in: dt.datetime
    clock_out: Optional[dt.datetime] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None


class AttendanceUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")
    clock_in: Optional[dt.datetime] = None
    clock_out: Optional[dt.datetime] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
