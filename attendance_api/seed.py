"""Seed default admin user if not present."""
import logging

from attendance_api.api.deps import get_password_hash
from attendance_api.models.user import User, UserRole

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@company.com"
ADMIN_PASSWORD = "admin123"
ADMIN_NAME = "Admin User"


async def seed_admin():
    existing = await User.find_one(User.role == UserRole.ADMIN)
    if existing:
        return
    await User(
        email=ADMIN_EMAIL,
        hashed_password=get_password_hash(ADMIN_PASSWORD),
        name=ADMIN_NAME,
        role=UserRole.ADMIN,
        department="Administration",
        position="System Administrator",
    ).insert()
    logger.warning(f"Created default admin {ADMIN_EMAIL}; change its password")
