import re
from datetime import date, timedelta
from typing import Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from attendance_api.api.deps import AdminOnly, ClockDep, CurrentUser, Employees, ManualEntries, Store
from attendance_api.models.attendance import (
    AttendanceEntry,
    AttendanceRecord,
    AttendanceStatus,
    AttendanceUpdate,
    ManualAttendanceCreate,
)
from attendance_api.models.user import EmployeeAccount, User, UserRole
from attendance_api.services import reports
from attendance_api.services.clock import Clock

router = APIRouter()


def _date_range(clock: Clock, start_date: Optional[date], end_date: Optional[date]) -> dict:
    """Mongo filter on `date`; end_date is inclusive."""
    rng = {}
    if start_date:
        rng["$gte"] = clock.start_of_day(start_date)
    if end_date:
        rng["$lt"] = clock.start_of_day(end_date + timedelta(days=1))
    return rng


async def _employees_by_id(employee_ids) -> dict[str, EmployeeAccount]:
    oids = []
    for employee_id in set(employee_ids):
        try:
            oids.append(PydanticObjectId(employee_id))
        except (InvalidId, TypeError):
            continue
    users = await User.find({"_id": {"$in": oids}}).to_list()
    return {str(u.id): EmployeeAccount.from_document(u) for u in users}


async def _active_employees() -> list[EmployeeAccount]:
    users = await User.find({"role": UserRole.EMPLOYEE.value, "is_active": True}).sort("name").to_list()
    return [EmployeeAccount.from_document(u) for u in users]


async def _page(query: dict, page: int, limit: int) -> tuple[list[AttendanceEntry], int]:
    total = await AttendanceRecord.find(query).count()
    records = (
        await AttendanceRecord.find(query)
        .sort(-AttendanceRecord.date)
        .skip((page - 1) * limit)
        .limit(limit)
        .to_list()
    )
    return [r.to_entry() for r in records], total


def _with_employee(entry: AttendanceEntry, employees: dict[str, EmployeeAccount]) -> dict:
    data = entry.public()
    employee = employees.get(entry.employee_id)
    data["employee"] = employee.public() if employee else None
    return data


@router.get("/my-attendance")
async def my_attendance(
    user: CurrentUser,
    clock: ClockDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    """Current user's attendance history, newest first."""
    query: dict = {"employee_id": user.id}
    rng = _date_range(clock, start_date, end_date)
    if rng:
        query["date"] = rng
    entries, total = await _page(query, page, limit)
    return {
        "attendance": [e.public() for e in entries],
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
        "total": total,
    }


@router.get("/")
async def list_attendance(
    admin: AdminOnly,
    clock: ClockDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    employee_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status_filter: Optional[AttendanceStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
):
    """All attendance records, filtered by employee, date range, status or employee name/email."""
    query: dict = {}
    if employee_id:
        query["employee_id"] = employee_id
    rng = _date_range(clock, start_date, end_date)
    if rng:
        query["date"] = rng
    if status_filter:
        query["status"] = status_filter.value
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        matches = await User.find({"$or": [{"name": pattern}, {"email": pattern}]}).to_list()
        query["employee_id"] = {"$in": [str(u.id) for u in matches]}

    entries, total = await _page(query, page, limit)
    employees = await _employees_by_id(e.employee_id for e in entries)
    return {
        "attendance": [_with_employee(e, employees) for e in entries],
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
        "total": total,
    }


async def _today_entries(clock: Clock) -> list[AttendanceEntry]:
    start, end = clock.day_bounds(clock.now())
    records = await AttendanceRecord.find({"date": {"$gte": start, "$lt": end}}).to_list()
    return [r.to_entry() for r in records]


@router.get("/today-overview")
async def today_overview(admin: AdminOnly, clock: ClockDep):
    """Every active employee with today's attendance (absent when there is none)."""
    return reports.build_overview(await _active_employees(), await _today_entries(clock))


@router.get("/active-sessions")
async def active_sessions(admin: AdminOnly, clock: ClockDep):
    """Every active employee with their session, only open sessions count as logged in."""
    rows = reports.build_overview(
        await _active_employees(), await _today_entries(clock), open_sessions_only=True
    )
    return [{"employee": row["employee"], "session": row["attendance"]} for row in rows]


@router.get("/stats/overview")
async def attendance_stats(
    admin: AdminOnly,
    clock: ClockDep,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    query: dict = {}
    rng = _date_range(clock, start_date, end_date)
    if rng:
        query["date"] = rng
    grouped = await AttendanceRecord.find(query).aggregate(
        [{"$group": {"_id": "$status", "count": {"$sum": 1}}}]
    ).to_list()
    status_counts = {row["_id"]: row["count"] for row in grouped}
    total_employees = await User.find({"role": UserRole.EMPLOYEE.value, "is_active": True}).count()
    return reports.summarize(status_counts, sum(status_counts.values()), total_employees)


@router.get("/export")
async def export_attendance(
    admin: AdminOnly,
    clock: ClockDep,
    start_date: date,
    end_date: date,
    employee_id: Optional[str] = None,
    format: str = Query("csv", enum=["csv", "excel"]),
):
    """Download attendance for a date range as CSV or Excel."""
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")
    query: dict = {"date": _date_range(clock, start_date, end_date)}
    if employee_id:
        query["employee_id"] = employee_id
    records = await AttendanceRecord.find(query).sort("date").to_list()
    if not records:
        raise HTTPException(status_code=404, detail="No records found for the given criteria")

    entries = [r.to_entry() for r in records]
    df = reports.to_dataframe(entries, await _employees_by_id(e.employee_id for e in entries))
    filename = f"attendance_{start_date}_{end_date}"
    if format == "csv":
        return StreamingResponse(
            iter([reports.export_csv(df)]),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}.csv"},
        )
    return StreamingResponse(
        reports.export_excel(df),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}.xlsx"},
    )


@router.post("/manual", status_code=status.HTTP_201_CREATED)
async def create_manual_attendance(data: ManualAttendanceCreate, admin: AdminOnly, manual: ManualEntries):
    created = await manual.create(data, admin_id=admin.id)
    return {"message": "Manual attendance record created successfully", "attendance": created.public()}


@router.get("/{record_id}")
async def get_attendance_record(record_id: str, user: CurrentUser, store: Store, employees: Employees):
    record = await store.get(record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Attendance record not found")
    if not user.is_admin and record.employee_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    employee = await employees.find_by_id(record.employee_id)
    return _with_employee(record, {employee.id: employee} if employee else {})


@router.put("/{record_id}")
async def update_attendance_record(
    record_id: str, data: AttendanceUpdate, admin: AdminOnly, manual: ManualEntries
):
    updated = await manual.edit(record_id, data, admin_id=admin.id)
    return {"message": "Attendance record updated successfully", "attendance": updated.public()}
