import io

import pandas as pd

from attendance_api.models.attendance import AttendanceEntry, AttendanceStatus
from attendance_api.models.user import EmployeeAccount, UserRole
from attendance_api.services import reports
from helpers import utc


def _employee(employee_id, name):
    return EmployeeAccount(id=employee_id, email=f"{name.lower()}@company.com", name=name, role=UserRole.EMPLOYEE)


def _entries():
    return [
        AttendanceEntry(
            id="r1", employee_id="e1", date=utc(2024, 1, 1), clock_in=utc(2024, 1, 1, 9, 0)
        ),
        AttendanceEntry(
            id="r2",
            employee_id="e2",
            date=utc(2024, 1, 1),
            clock_in=utc(2024, 1, 1, 8, 0),
            clock_out=utc(2024, 1, 1, 12, 0),
            total_hours=4.0,
            status=AttendanceStatus.HALF_DAY,
        ),
    ]


def test_overview_marks_missing_employees_absent():
    employees = [_employee("e1", "Alice"), _employee("e2", "Bob"), _employee("e3", "Carol")]

    rows = reports.build_overview(employees, _entries())

    by_name = {row["employee"]["name"]: row["attendance"] for row in rows}
    assert by_name["Alice"]["is_logged_in"] is True
    assert by_name["Bob"]["status"] == "half-day"
    assert by_name["Bob"]["is_logged_in"] is False
    assert by_name["Carol"] == {
        "clock_in": None,
        "clock_out": None,
        "total_hours": 0,
        "status": "absent",
        "is_logged_in": False,
    }


def test_active_sessions_only_count_open_sessions():
    employees = [_employee("e1", "Alice"), _employee("e2", "Bob")]

    rows = reports.build_overview(employees, _entries(), open_sessions_only=True)

    by_name = {row["employee"]["name"]: row["attendance"] for row in rows}
    assert by_name["Alice"]["is_logged_in"] is True
    assert by_name["Bob"]["status"] == "absent"


def test_summary_attendance_rate():
    stats = reports.summarize({"present": 3, "late": 1}, total_records=4, total_employees=4)

    assert stats["present_records"] == 3
    assert stats["late_records"] == 1
    assert stats["half_day_records"] == 0
    assert stats["attendance_rate"] == 75


def test_summary_without_employees():
    assert reports.summarize({}, 0, 0)["attendance_rate"] == 0


def test_csv_export_has_one_row_per_record():
    employees = {"e1": _employee("e1", "Alice")}

    df = reports.to_dataframe(_entries(), employees)
    parsed = pd.read_csv(io.StringIO(reports.export_csv(df)))

    assert list(parsed.columns) == reports.EXPORT_COLUMNS
    assert list(parsed["Employee"]) == ["Alice", "Unknown"]
    assert list(parsed["Total Hours"]) == [0.0, 4.0]
