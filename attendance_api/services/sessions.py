"""Clock-in/clock-out session reconciliation.

Every login decides, against the employee's record for "today", whether to
open a new workday session, continue one that was closed moments ago, or
simply report the session that is already open:

* no record today          -> create one, clock_in = now
* record open              -> unchanged, its clock_in is the session start
* closed within the window -> reopen (clear clock_out, keep clock_in)
* closed before the window -> restart the same record (clock_in = now)

A day never gets a second record; the store's unique (employee, date) index
and versioned updates settle races between concurrent logins, and the loser
re-runs the decision once against the winner's result.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from attendance_api.exceptions import NotFoundError, StorageConflict
from attendance_api.models.attendance import AttendanceEntry, SessionDescriptor
from attendance_api.services.attendance_store import AttendanceStore
from attendance_api.services.clock import Clock
from attendance_api.services.directory import EmployeeDirectory
from attendance_api.services.duration import elapsed

logger = logging.getLogger(__name__)

DEFAULT_REOPEN_WINDOW = timedelta(minutes=10)


class SessionManager:
    def __init__(
        self,
        store: AttendanceStore,
        clock: Clock,
        employees: EmployeeDirectory | None = None,
        *,
        reopen_window: timedelta = DEFAULT_REOPEN_WINDOW,
    ):
        self._store = store
        self._clock = clock
        self._employees = employees
        self._reopen_window = reopen_window

    async def reconcile_login(self, employee_id: str, now: datetime | None = None) -> SessionDescriptor:
        now = self._clock.localize(now) if now else self._clock.now()
        if self._employees is not None and await self._employees.find_by_id(employee_id) is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        try:
            return await self._login_once(employee_id, now)
        except StorageConflict:
            logger.info(f"Concurrent attendance write for employee {employee_id}; retrying login")
            return await self._login_once(employee_id, now)

    async def reconcile_logout(self, employee_id: str, now: datetime | None = None) -> Optional[AttendanceEntry]:
        """Close today's open session. No open session is not an error."""
        now = self._clock.localize(now) if now else self._clock.now()
        try:
            return await self._logout_once(employee_id, now)
        except StorageConflict:
            logger.info(f"Concurrent attendance write for employee {employee_id}; retrying logout")
            return await self._logout_once(employee_id, now)

    async def today(self, employee_id: str, now: datetime | None = None) -> Optional[AttendanceEntry]:
        now = self._clock.localize(now) if now else self._clock.now()
        start, end = self._clock.day_bounds(now)
        return await self._store.find_for_day(employee_id, start, end)

    async def _login_once(self, employee_id: str, now: datetime) -> SessionDescriptor:
        start, end = self._clock.day_bounds(now)
        record = await self._store.find_for_day(employee_id, start, end)

        if record is None:
            created = await self._store.insert(
                AttendanceEntry(employee_id=employee_id, date=start, clock_in=now)
            )
            logger.info(f"Employee {employee_id}: new session started at {now.isoformat()}")
            return SessionDescriptor.from_entry(created, is_continuation=False)

        if record.clock_out is None and record.clock_in is not None:
            logger.info(f"Employee {employee_id}: session already open since {record.clock_in.isoformat()}")
            return SessionDescriptor.from_entry(record, is_continuation=False)

        if record.clock_out is not None and elapsed(record.clock_out, now) <= self._reopen_window:
            changes = {"clock_out": None}
            is_continuation = True
        else:
            changes = {"clock_in": now, "clock_out": None}
            is_continuation = False

        saved = await self._store.update(record.model_copy(update=changes).with_total_hours())
        if is_continuation:
            logger.info(f"Employee {employee_id}: session reopened, started {saved.clock_in.isoformat()}")
        else:
            logger.info(f"Employee {employee_id}: session restarted at {now.isoformat()}")
        return SessionDescriptor.from_entry(saved, is_continuation=is_continuation)

    async def _logout_once(self, employee_id: str, now: datetime) -> Optional[AttendanceEntry]:
        start, end = self._clock.day_bounds(now)
        record = await self._store.find_for_day(employee_id, start, end)
        if record is None or record.clock_in is None or record.clock_out is not None:
            return None
        saved = await self._store.update(record.model_copy(update={"clock_out": now}).with_total_hours())
        logger.info(f"Employee {employee_id}: session closed, {saved.total_hours}h today")
        return saved
