"""Employees and administrators."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field, field_validator


class UserRole(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class User(Document):
    """User document; every user clocks in on login, admins also manage records."""

    email: Indexed(EmailStr, unique=True)
    hashed_password: str
    name: str
    role: UserRole = UserRole.EMPLOYEE
    department: str = "General"
    position: str = "Employee"
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()

    class Settings:
        name = "users"
        use_state_management = True


class EmployeeAccount(BaseModel):
    """Directory view of a user, independent of the storage document."""

    id: str
    email: str
    name: str
    role: UserRole
    department: str = "General"
    position: str = "Employee"
    is_active: bool = True
    hashed_password: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_document(cls, user: User) -> "EmployeeAccount":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            role=user.role,
            department=user.department,
            position=user.position,
            is_active=user.is_active,
            hashed_password=user.hashed_password,
        )

    def public(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
            "position": self.position,
        }


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    department: Optional[str] = None
    position: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: Optional[bool] = None


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    department: str
    position: str
    is_active: bool
    created_at: datetime

    @classmethod
    def from_document(cls, user: User) -> "UserOut":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            role=user.role,
            department=user.department,
            position=user.position,
            is_active=user.is_active,
            created_at=user.created_at,
        )
