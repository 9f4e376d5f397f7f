"""Attendance overviews, statistics and exports."""
from __future__ import annotations

import io
from typing import Iterable

import pandas as pd

from attendance_api.models.attendance import AttendanceEntry, AttendanceStatus
from attendance_api.models.user import EmployeeAccount

EXPORT_COLUMNS = [
    "Date",
    "Employee",
    "Email",
    "Department",
    "Clock In",
    "Clock Out",
    "Total Hours",
    "Status",
    "Manual Entry",
    "Notes",
]


def _absent_placeholder() -> dict:
    return {
        "clock_in": None,
        "clock_out": None,
        "total_hours": 0,
        "status": AttendanceStatus.ABSENT.value,
        "is_logged_in": False,
    }


def build_overview(
    employees: Iterable[EmployeeAccount],
    records: Iterable[AttendanceEntry],
    *,
    open_sessions_only: bool = False,
) -> list[dict]:
    """One row per employee with today's record, or an absent placeholder."""
    by_employee = {}
    for record in records:
        if open_sessions_only and not record.is_logged_in:
            continue
        by_employee[record.employee_id] = record

    rows = []
    for employee in employees:
        record = by_employee.get(employee.id)
        if record is None:
            attendance = _absent_placeholder()
        else:
            attendance = {
                "clock_in": record.clock_in,
                "clock_out": record.clock_out,
                "total_hours": record.total_hours,
                "status": record.status.value,
                "is_logged_in": record.is_logged_in,
            }
        rows.append({"employee": employee.public(), "attendance": attendance})
    return rows


def summarize(status_counts: dict[str, int], total_records: int, total_employees: int) -> dict:
    present = status_counts.get(AttendanceStatus.PRESENT.value, 0)
    return {
        "total_records": total_records,
        "present_records": present,
        "absent_records": status_counts.get(AttendanceStatus.ABSENT.value, 0),
        "late_records": status_counts.get(AttendanceStatus.LATE.value, 0),
        "half_day_records": status_counts.get(AttendanceStatus.HALF_DAY.value, 0),
        "total_employees": total_employees,
        "attendance_rate": round(present / total_employees * 100) if total_employees > 0 else 0,
    }


def _fmt(moment) -> str:
    return moment.strftime("%Y-%m-%d %H:%M:%S") if moment else ""


def to_dataframe(records: Iterable[AttendanceEntry], employees: dict[str, EmployeeAccount]) -> pd.DataFrame:
    data = []
    for record in records:
        employee = employees.get(record.employee_id)
        data.append(
            {
                "Date": record.date.strftime("%Y-%m-%d"),
                "Employee": employee.name if employee else "Unknown",
                "Email": employee.email if employee else "",
                "Department": employee.department if employee else "",
                "Clock In": _fmt(record.clock_in),
                "Clock Out": _fmt(record.clock_out),
                "Total Hours": record.total_hours,
                "Status": record.status.value,
                "Manual Entry": record.is_manual_entry,
                "Notes": record.notes,
            }
        )
    return pd.DataFrame(data, columns=EXPORT_COLUMNS)


def export_csv(df: pd.DataFrame) -> str:
    stream = io.StringIO()
    df.to_csv(stream, index=False)
    return stream.getvalue()


def export_excel(df: pd.DataFrame) -> io.BytesIO:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Attendance")
    output.seek(0)
    return output
