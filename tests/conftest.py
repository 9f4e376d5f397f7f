import itertools
import os

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("TIMEZONE", "UTC")

import bcrypt
import pytest

from attendance_api.exceptions import StorageConflict, StorageUnavailable
from attendance_api.models.attendance import AttendanceEntry
from attendance_api.models.user import EmployeeAccount, UserRole
from attendance_api.services.clock import FixedClock
from helpers import utc


class InMemoryAttendanceStore:
    """AttendanceStore keeping the (employee, day) uniqueness and version checks of the real one."""

    def __init__(self):
        self.records: dict[str, AttendanceEntry] = {}
        self.writes = 0
        self._ids = itertools.count(1)

    async def find_for_day(self, employee_id, start, end):
        for record in self.records.values():
            if record.employee_id == employee_id and start <= record.date < end:
                return record.model_copy()
        return None

    async def get(self, record_id):
        record = self.records.get(record_id)
        return record.model_copy() if record else None

    async def insert(self, entry):
        for record in self.records.values():
            if record.employee_id == entry.employee_id and record.date == entry.date:
                raise StorageConflict("duplicate (employee_id, date)")
        stored = entry.with_total_hours().model_copy(update={"id": str(next(self._ids)), "version": 0})
        self.records[stored.id] = stored
        self.writes += 1
        return stored.model_copy()

    async def update(self, entry):
        current = self.records.get(entry.id)
        if current is None or current.version != entry.version:
            raise StorageConflict("stale version")
        stored = entry.with_total_hours().model_copy(update={"version": entry.version + 1})
        self.records[stored.id] = stored
        self.writes += 1
        return stored.model_copy()

    def for_employee(self, employee_id):
        return [r for r in self.records.values() if r.employee_id == employee_id]


class RacingAttendanceStore(InMemoryAttendanceStore):
    """Another request inserts today's record just before our first insert lands."""

    def __init__(self, competitor_clock_in):
        super().__init__()
        self.competitor_clock_in = competitor_clock_in
        self.raced = False

    async def insert(self, entry):
        if not self.raced:
            self.raced = True
            await super().insert(entry.model_copy(update={"clock_in": self.competitor_clock_in}))
        return await super().insert(entry)


class AlwaysStaleStore(InMemoryAttendanceStore):
    async def update(self, entry):
        raise StorageConflict("stale version")


class UnavailableStore(InMemoryAttendanceStore):
    async def find_for_day(self, employee_id, start, end):
        raise StorageUnavailable("Attendance store unavailable")


class InMemoryDirectory:
    def __init__(self):
        self.accounts: dict[str, EmployeeAccount] = {}

    def add(self, employee_id, email, *, password="secret123", role=UserRole.EMPLOYEE, is_active=True, name=None):
        account = EmployeeAccount(
            id=employee_id,
            email=email.lower(),
            name=name or email.split("@")[0].title(),
            role=role,
            is_active=is_active,
            hashed_password=bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8"),
        )
        self.accounts[employee_id] = account
        return account

    async def find_by_id(self, employee_id):
        return self.accounts.get(employee_id)

    async def find_by_email(self, email):
        email = email.strip().lower()
        return next((a for a in self.accounts.values() if a.email == email), None)

@pytest.fixture()
def store():
    return InMemoryAttendanceStore()


@pytest.fixture()
def directory():
    d = InMemoryDirectory()
    d.add("emp-1", "alice@company.com")
    d.add("emp-2", "bob@company.com")
    d.add("emp-off", "carol@company.com", is_active=False)
    d.add("admin-1", "admin@company.com", role=UserRole.ADMIN, password="admin123")
    return d


@pytest.fixture()
def clock():
    return FixedClock(utc(2024, 1, 1, 9, 0))


@pytest.fixture()
def racing_store_factory():
    return RacingAttendanceStore


@pytest.fixture()
def always_stale_store():
    return AlwaysStaleStore()


@pytest.fixture()
def unavailable_store():
    return UnavailableStore()
