"""Beanie document models and Pydantic schemas."""
from attendance_api.models.user import User, UserRole, UserCreate, UserUpdate, UserOut, EmployeeAccount
from attendance_api.models.attendance import (
    AttendanceRecord,
    AttendanceEntry,
    AttendanceStatus,
    AttendanceUpdate,
    ManualAttendanceCreate,
    SessionDescriptor,
)
from attendance_api.models.request import (
    EmployeeRequest,
    Attachment,
    RequestCategory,
    RequestPriority,
    RequestStatus,
    RequestCreate,
    RequestStatusUpdate,
    RequestOut,
)

__all__ = [
    "User",
    "UserRole",
    "UserCreate",
    "UserUpdate",
    "UserOut",
    "EmployeeAccount",
    "AttendanceRecord",
    "AttendanceEntry",
    "AttendanceStatus",
    "AttendanceUpdate",
    "ManualAttendanceCreate",
    "SessionDescriptor",
    "EmployeeRequest",
    "Attachment",
    "RequestCategory",
    "RequestPriority",
    "RequestStatus",
    "RequestCreate",
    "RequestStatusUpdate",
    "RequestOut",
]
