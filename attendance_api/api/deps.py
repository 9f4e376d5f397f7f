"""Shared dependencies: JWT auth, role checks and service wiring."""
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Annotated, Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from attendance_api.config import settings
from attendance_api.models.user import EmployeeAccount, UserRole
from attendance_api.services.attendance_store import AttendanceStore, BeanieAttendanceStore
from attendance_api.services.clock import Clock
from attendance_api.services.directory import BeanieEmployeeDirectory, EmployeeDirectory
from attendance_api.services.manual_entry import ManualEntryService
from attendance_api.services.sessions import SessionManager

security = HTTPBearer(auto_error=False)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_access_token(subject: str, role: str) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    to_encode = {"sub": subject, "role": role, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@lru_cache
def get_clock() -> Clock:
    return Clock(settings.timezone)


def get_attendance_store() -> AttendanceStore:
    return BeanieAttendanceStore()


def get_employee_directory() -> EmployeeDirectory:
    return BeanieEmployeeDirectory()


def get_session_manager(
    store: Annotated[AttendanceStore, Depends(get_attendance_store)],
    clock: Annotated[Clock, Depends(get_clock)],
    employees: Annotated[EmployeeDirectory, Depends(get_employee_directory)],
) -> SessionManager:
    return SessionManager(
        store,
        clock,
        employees,
        reopen_window=timedelta(minutes=settings.session_reopen_minutes),
    )


def get_manual_entry_service(
    store: Annotated[AttendanceStore, Depends(get_attendance_store)],
    employees: Annotated[EmployeeDirectory, Depends(get_employee_directory)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> ManualEntryService:
    return ManualEntryService(store, employees, clock)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    employees: Annotated[EmployeeDirectory, Depends(get_employee_directory)],
) -> EmployeeAccount:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = credentials.credentials
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        user_id: str = payload.get("sub")
        if not user_id or payload.get("type") != "access":
            raise HTTPException(status_code=401, detail="Invalid token")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user = await employees.find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is deactivated")
    return user


def require_roles(*allowed: UserRole):
    async def checker(user: Annotated[EmployeeAccount, Depends(get_current_user)]):
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker


# Type aliases for route injection
CurrentUser = Annotated[EmployeeAccount, Depends(get_current_user)]
AdminOnly = Annotated[EmployeeAccount, Depends(require_roles(UserRole.ADMIN))]
Sessions = Annotated[SessionManager, Depends(get_session_manager)]
ManualEntries = Annotated[ManualEntryService, Depends(get_manual_entry_service)]
Store = Annotated[AttendanceStore, Depends(get_attendance_store)]
Employees = Annotated[EmployeeDirectory, Depends(get_employee_directory)]
ClockDep = Annotated[Clock, Depends(get_clock)]
