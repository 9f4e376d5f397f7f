"""Employee lookups used by authentication and attendance."""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from attendance_api.exceptions import StorageUnavailable
from attendance_api.models.user import EmployeeAccount, User

logger = logging.getLogger(__name__)


class EmployeeDirectory(Protocol):
    async def find_by_id(self, employee_id: str) -> Optional[EmployeeAccount]:
        ...

    async def find_by_email(self, email: str) -> Optional[EmployeeAccount]:
        ...


class BeanieEmployeeDirectory:
    async def find_by_id(self, employee_id: str) -> Optional[EmployeeAccount]:
        try:
            oid = PydanticObjectId(employee_id)
        except (InvalidId, TypeError):
            return None
        try:
            user = await User.get(oid)
        except PyMongoError as e:
            logger.error(f"Employee lookup failed for {employee_id}: {e}")
            raise StorageUnavailable("Employee directory unavailable") from e
        return EmployeeAccount.from_document(user) if user else None

    async def find_by_email(self, email: str) -> Optional[EmployeeAccount]:
        try:
            user = await User.find_one({"email": email.strip().lower()})
        except PyMongoError as e:
            logger.error(f"Employee lookup failed for {email}: {e}")
            raise StorageUnavailable("Employee directory unavailable") from e
        return EmployeeAccount.from_document(user) if user else None
