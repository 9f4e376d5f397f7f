"""Request ticket workflow helpers."""
from datetime import datetime
from typing import Optional

from attendance_api.models.request import RequestStatus

CLOSED_STATUSES = {RequestStatus.RESOLVED, RequestStatus.REJECTED}


def apply_status_update(
    request,
    status: RequestStatus,
    *,
    admin_response: Optional[str] = None,
    resolved_by: Optional[str] = None,
    now: Optional[datetime] = None,
):
    """Move a request to a new status.

    The response and resolver are only overwritten when given; closing a
    request (resolved or rejected) stamps resolved_at.
    """
    now = now or datetime.utcnow()
    request.status = status
    if admin_response:
        request.admin_response = admin_response
    if resolved_by:
        request.resolved_by = resolved_by
    if status in CLOSED_STATUSES:
        request.resolved_at = now
    request.updated_at = now
    return request


def group_counts(rows: list[dict]) -> list[dict]:
    """Normalise `$group` aggregation output to [{"key": ..., "count": ...}]."""
    return sorted(
        ({"key": row.get("_id"), "count": int(row.get("count", 0))} for row in rows),
        key=lambda item: (-item["count"], str(item["key"])),
    )
