"""Employee requests (internal tickets) and their admin handling."""
from typing import Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, HTTPException, Query, status

from attendance_api.api.deps import AdminOnly, CurrentUser
from attendance_api.models.request import (
    EmployeeRequest,
    RequestCategory,
    RequestCreate,
    RequestOut,
    RequestPriority,
    RequestStatus,
    RequestStatusUpdate,
)
from attendance_api.services.requests import apply_status_update, group_counts

router = APIRouter()


def _to_out(req: EmployeeRequest) -> RequestOut:
    return RequestOut(**req.model_dump(exclude={"id", "revision_id"}), id=str(req.id))


async def _get_request_or_404(request_id: str) -> EmployeeRequest:
    try:
        oid = PydanticObjectId(request_id)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=404, detail="Request not found")
    req = await EmployeeRequest.get(oid)
    if not req:
        raise HTTPException(status_code=404, detail="Request not found")
    return req


async def _paginate(query: dict, page: int, limit: int) -> dict:
    total = await EmployeeRequest.find(query).count()
    items = (
        await EmployeeRequest.find(query)
        .sort(-EmployeeRequest.created_at)
        .skip((page - 1) * limit)
        .limit(limit)
        .to_list()
    )
    return {
        "requests": [_to_out(r) for r in items],
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
        "total": total,
    }


@router.get("/")
async def list_requests(
    admin: AdminOnly,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    category: Optional[RequestCategory] = None,
    priority: Optional[RequestPriority] = None,
):
    query: dict = {}
    if status_filter:
        query["status"] = status_filter.value
    if category:
        query["category"] = category.value
    if priority:
        query["priority"] = priority.value
    return await _paginate(query, page, limit)


@router.get("/my-requests")
async def my_requests(
    user: CurrentUser,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    return await _paginate({"employee_id": user.id}, page, limit)


@router.get("/stats/overview")
async def request_stats(admin: AdminOnly):
    async def grouped(field: str) -> list[dict]:
        rows = await EmployeeRequest.aggregate(
            [{"$group": {"_id": f"${field}", "count": {"$sum": 1}}}]
        ).to_list()
        return group_counts(rows)

    return {
        "total_requests": await EmployeeRequest.count(),
        "pending_requests": await EmployeeRequest.find(
            {"status": RequestStatus.PENDING.value}
        ).count(),
        "status_stats": await grouped("status"),
        "category_stats": await grouped("category"),
        "priority_stats": await grouped("priority"),
    }


@router.get("/{request_id}", response_model=RequestOut)
async def get_request(request_id: str, user: CurrentUser):
    req = await _get_request_or_404(request_id)
    if not user.is_admin and req.employee_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    return _to_out(req)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_request(data: RequestCreate, user: CurrentUser):
    req = EmployeeRequest(employee_id=user.id, **data.model_dump())
    await req.insert()
    return {"message": "Request created successfully", "request": _to_out(req)}


@router.put("/{request_id}/status")
async def update_request_status(request_id: str, data: RequestStatusUpdate, admin: AdminOnly):
    req = await _get_request_or_404(request_id)
    apply_status_update(req, data.status, admin_response=data.admin_response, resolved_by=admin.id)
    await req.save()
    return {"message": "Request status updated successfully", "request": _to_out(req)}
