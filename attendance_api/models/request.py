"""Internal requests raised by employees and handled by administrators."""
import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, ConfigDict, Field
from pymongo import ASCENDING, DESCENDING, IndexModel


class RequestCategory(str, Enum):
    ATTENDANCE = "attendance"
    LEAVE = "leave"
    GENERAL = "general"
    TECHNICAL = "technical"
    HR = "hr"
    OTHER = "other"


class RequestPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Attachment(BaseModel):
    filename: str
    original_name: str
    path: str
    uploaded_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


class EmployeeRequest(Document):
    employee_id: Indexed(str)
    subject: str = Field(max_length=200)
    description: str = Field(max_length=1000)
    category: RequestCategory = RequestCategory.GENERAL
    priority: RequestPriority = RequestPriority.MEDIUM
    status: RequestStatus = RequestStatus.PENDING
    admin_response: Optional[str] = Field(default=None, max_length=1000)
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime.datetime] = None
    attachments: list[Attachment] = Field(default_factory=list)
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

    class Settings:
        name = "requests"
        use_state_management = True
        indexes = [
            IndexModel([("employee_id", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel([("status", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel([("category", ASCENDING), ("status", ASCENDING)]),
        ]


class RequestCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)
    subject: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=1000)
    category: RequestCategory = RequestCategory.GENERAL
    priority: RequestPriority = RequestPriority.MEDIUM


class RequestStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)
    status: RequestStatus
    admin_response: Optional[str] = Field(default=None, max_length=1000)


class RequestOut(BaseModel):
    id: str
    employee_id: str
    subject: str
    description: str
    category: RequestCategory
    priority: RequestPriority
    status: RequestStatus
    admin_response: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime.datetime] = None
    attachments: list[Attachment] = []
    created_at: datetime.datetime
    updated_at: datetime.datetime
