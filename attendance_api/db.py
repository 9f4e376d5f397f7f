"""MongoDB connection and Beanie document registration."""
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from attendance_api.config import settings
from attendance_api.models import AttendanceRecord, EmployeeRequest, User


_client = None


async def db_startup():
    """Connect to MongoDB and initialize Beanie ODM."""
    global _client
    # tz_aware so clock-in/out come back comparable with the service clock
    _client = AsyncIOMotorClient(settings.mongodb_url, tz_aware=True)
    await init_beanie(
        database=_client[settings.mongodb_db_name],
        document_models=[
            User,
            AttendanceRecord,
            EmployeeRequest,
        ],
    )


async def db_shutdown():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        _client = None
