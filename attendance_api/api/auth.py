"""JWT-based stateless authentication; login and logout drive clock-in/out."""
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from attendance_api.api.deps import (
    ClockDep,
    CurrentUser,
    Employees,
    Sessions,
    create_access_token,
    get_password_hash,
    verify_password,
)
from attendance_api.exceptions import AuthenticationError, InactiveEmployeeError
from attendance_api.models.user import EmployeeAccount, User, UserCreate, UserRole

router = APIRouter()


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/login")
async def login(req: LoginRequest, employees: Employees, sessions: Sessions, clock: ClockDep):
    user = await employees.find_by_email(req.email)
    if not user or not verify_password(req.password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise InactiveEmployeeError("Account is deactivated")

    session = await sessions.reconcile_login(user.id, clock.now())
    return {
        "message": "Login successful - Session continued" if session.is_continuation else "Login successful",
        "access_token": create_access_token(user.id, user.role.value),
        "token_type": "bearer",
        "user": user.public(),
        "attendance": {
            "clock_in": session.clock_in,
            "clock_out": session.clock_out,
            "is_logged_in": session.is_logged_in,
        },
        "session_info": {
            "start_time": session.session_start_time,
            "is_continuation": session.is_continuation,
        },
    }


@router.post("/logout")
async def logout(user: CurrentUser, sessions: Sessions, clock: ClockDep):
    closed = await sessions.reconcile_logout(user.id, clock.now())
    return {
        "message": "Logout successful",
        "total_hours": closed.total_hours if closed else None,
    }


@router.get("/me")
async def me(user: CurrentUser, sessions: Sessions, clock: ClockDep):
    record = await sessions.today(user.id, clock.now())
    return {
        "user": user.public(),
        "attendance": {
            "clock_in": record.clock_in,
            "clock_out": record.clock_out,
            "is_logged_in": record.is_logged_in,
            "total_hours": record.total_hours,
        } if record else None,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(data: UserCreate, employees: Employees):
    if await employees.find_by_email(data.email):
        raise HTTPException(status_code=400, detail="User with this email already exists")
    user = User(
        email=data.email.lower(),
        hashed_password=get_password_hash(data.password),
        name=data.name,
        role=UserRole.EMPLOYEE,
        department=data.department or "General",
        position=data.position or "Employee",
    )
    await user.insert()
    account = EmployeeAccount.from_document(user)
    return {
        "message": "User registered successfully",
        "access_token": create_access_token(account.id, account.role.value),
        "token_type": "bearer",
        "user": account.public(),
    }


@router.get("/verify")
async def verify(user: CurrentUser):
    return {"valid": True, "user": user.public()}
