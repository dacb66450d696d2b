# File: tazasu/api/v1/routes_admin.py

"""
Administrator routes. Every endpoint requires an authenticated admin; the
role is checked against the stored user, not the token.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from tazasu.api.deps import AdminUser, DbSession, Uploads, require_admin
from tazasu.schemas.common import MessageResponse, Pagination
from tazasu.schemas.complaint import (
    AdminComplaintList,
    ComplaintRead,
    ComplaintResponse,
    StatusUpdate,
)
from tazasu.schemas.user import AdminUserRead
from tazasu.services import complaint_service, user_service
from tazasu.services.complaint_service import ComplaintFilter

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/complaints", response_model=AdminComplaintList, summary="All complaints")
def list_complaints(
    db: DbSession,
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=0),
    offset: int = Query(0, ge=0),
):
    """
    Filter by status and/or a case-insensitive search over name, description
    and address. Includes the reporter's contact details.
    """
    page = complaint_service.list_complaints(
        db,
        ComplaintFilter(status=status_filter, search=search),
        limit=limit,
        offset=offset,
        owner_fields=("name", "email", "phone"),
        stats_windows=True,
    )
    return {
        "complaints": page.items,
        "stats": page.stats,
        "pagination": Pagination(limit=limit, offset=offset, total=page.total),
    }


@router.patch(
    "/complaints/{complaint_id}/status",
    response_model=ComplaintResponse,
    summary="Change complaint status",
)
def update_status(complaint_id: int, payload: StatusUpdate, admin: AdminUser, db: DbSession):
    complaint = complaint_service.set_status(db, complaint_id, payload.status)
    logger.info("Status of complaint %s set to %s by %s", complaint_id, payload.status, admin.email)
    return ComplaintResponse(
        message="Status updated successfully",
        complaint=ComplaintRead.model_validate(complaint),
    )


@router.delete(
    "/complaints/{complaint_id}",
    response_model=MessageResponse,
    summary="Delete any complaint",
)
def delete_complaint(complaint_id: int, admin: AdminUser, db: DbSession, uploads: Uploads):
    photo_url = complaint_service.delete_complaint(db, complaint_id)
    uploads.remove(photo_url)
    logger.info("Complaint %s deleted by admin %s", complaint_id, admin.email)
    return MessageResponse(message="Complaint deleted successfully")


@router.get("/dashboard", summary="Dashboard statistics")
def dashboard(db: DbSession):
    complaints = complaint_service.status_counts(db, [], windows=True)
    complaints["total_complaints"] = complaints.pop("total")
    return {
        "success": True,
        "dashboard": {
            "complaints": complaints,
            "users": user_service.user_stats(db),
            "daily_stats": complaint_service.daily_counts(db, days=7),
            "top_regions": complaint_service.top_regions(db, limit=10),
        },
    }


@router.get("/users", summary="List users")
def list_users(
    db: DbSession,
    search: Optional[str] = Query(None),
    limit: int = Query(50, ge=0),
    offset: int = Query(0, ge=0),
):
    users, total = user_service.list_users(db, search=search, limit=limit, offset=offset)
    return {
        "success": True,
        "users": [AdminUserRead.model_validate(u) for u in users],
        "pagination": Pagination(limit=limit, offset=offset, total=total),
    }
