"""User administration."""
import re
from datetime import datetime
from typing import Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, HTTPException, Query, status

from attendance_api.api.deps import AdminOnly, CurrentUser, get_password_hash
from attendance_api.models.user import User, UserCreate, UserOut, UserRole, UserUpdate

router = APIRouter()


async def _get_user_or_404(user_id: str) -> User:
    try:
        oid = PydanticObjectId(user_id)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=404, detail="User not found")
    user = await User.get(oid)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/")
async def list_users(
    admin: AdminOnly,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    role: Optional[UserRole] = None,
):
    """List users, newest first, filtered by name/email search and role."""
    query: dict = {}
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"name": pattern}, {"email": pattern}]
    if role:
        query["role"] = role.value

    total = await User.find(query).count()
    users = (
        await User.find(query)
        .sort(-User.created_at)
        .skip((page - 1) * limit)
        .limit(limit)
        .to_list()
    )
    return {
        "users": [UserOut.from_document(u) for u in users],
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
        "total": total,
    }


@router.get("/profile/me")
async def get_profile(user: CurrentUser):
    return user.public()


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: str, admin: AdminOnly):
    return UserOut.from_document(await _get_user_or_404(user_id))


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_employee(data: UserCreate, admin: AdminOnly):
    """Create a new employee account."""
    email = data.email.lower()
    if await User.find_one(User.email == email):
        raise HTTPException(status_code=400, detail="User with this email already exists")
    user = User(
        email=email,
        hashed_password=get_password_hash(data.password),
        name=data.name,
        role=UserRole.EMPLOYEE,
        department=data.department or "General",
        position=data.position or "Employee",
    )
    await user.insert()
    return {"message": "Employee created successfully", "user": UserOut.from_document(user)}


@router.put("/{user_id}")
async def update_user(user_id: str, data: UserUpdate, admin: AdminOnly):
    user = await _get_user_or_404(user_id)

    if data.email and data.email.lower() != user.email:
        email = data.email.lower()
        if await User.find_one(User.email == email):
            raise HTTPException(status_code=400, detail="User with this email already exists")
        user.email = email

    if data.name:
        user.name = data.name
    if data.department:
        user.department = data.department
    if data.position:
        user.position = data.position
    if data.is_active is not None:
        user.is_active = data.is_active

    user.updated_at = datetime.utcnow()
    await user.save()
    return {"message": "User updated successfully", "user": UserOut.from_document(user)}


@router.delete("/{user_id}")
async def delete_user(user_id: str, admin: AdminOnly):
    user = await _get_user_or_404(user_id)
    if user.role == UserRole.ADMIN:
        raise HTTPException(status_code=400, detail="Cannot delete admin users")
    await user.delete()
    return {"message": "User deleted successfully"}
