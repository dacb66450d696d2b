# File: tazasu/api/v1/routes_complaints.py

"""
Complaint routes for citizens: submit, browse the public feed, list own
complaints, view, edit and delete (owner or admin).
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from tazasu.api.deps import AppSettings, CurrentUser, DbSession, Uploads, require_ownership
from tazasu.core.config import Settings
from tazasu.core.errors import NotFoundError, ValidationError
from tazasu.models.complaint import Complaint
from tazasu.schemas.common import MessageResponse, Pagination
from tazasu.schemas.complaint import (
    ComplaintCreated,
    ComplaintCreateResponse,
    ComplaintDetailResponse,
    ComplaintRead,
    ComplaintResponse,
    MyComplaintList,
    PublicComplaintList,
)
from tazasu.services import complaint_service
from tazasu.services.complaint_service import ComplaintFilter
from tazasu.services.upload_service import (
    PendingUpload,
    UploadKind,
    UploadStorage,
    read_optional_upload,
)

router = APIRouter()

owner_or_admin = require_ownership("complaint", "complaint_id")


def _parse_coordinate(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid coordinates", field="location")


# Blocking parts of the multipart handlers, run through the threadpool.

def _submit(
    db: Session,
    settings: Settings,
    uploads: UploadStorage,
    *,
    photo: Optional[PendingUpload],
    **fields,
) -> Complaint:
    stored = uploads.store(photo) if photo else None
    return complaint_service.create_complaint(
        db, settings, photo_url=stored.url if stored else None, **fields
    )


def _edit(
    db: Session,
    uploads: UploadStorage,
    complaint_id: int,
    *,
    photo: Optional[PendingUpload],
    **fields,
) -> Complaint:
    # Admins skip the ownership lookup, so existence is checked before any file is written.
    if complaint_service.get_owner_id(db, complaint_id) is None:
        raise NotFoundError("Complaint not found")

    stored = uploads.store(photo) if photo else None
    try:
        return complaint_service.update_complaint(
            db, complaint_id, photo_url=stored.url if stored else None, **fields
        )
    except Exception:
        if stored:
            uploads.remove(stored.url)
        raise


@router.post(
    "/",
    response_model=ComplaintCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a complaint",
)
async def create_complaint(
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
    uploads: Uploads,
    name: str = Form(""),
    description: str = Form(""),
    location_lat: str = Form(""),
    location_lng: str = Form(""),
    location_address: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
):
    """
    Multipart form with an optional ``photo``.

    Coordinates must lie inside the configured service region.
    """
    if not name.strip() or not description.strip() or not location_lat or not location_lng:
        raise ValidationError("Name, description and coordinates are required")

    lat = _parse_coordinate(location_lat)
    lng = _parse_coordinate(location_lng)
    complaint_service.check_coordinates(lat, lng, settings)

    pending = await read_optional_upload(photo, UploadKind.COMPLAINT)
    complaint = await run_in_threadpool(
        _submit,
        db,
        settings,
        uploads,
        owner_id=user.id,
        name=name,
        lat=lat,
        lng=lng,
        description=description,
        address=location_address,
        photo=pending,
    )
    return ComplaintCreateResponse(
        message="Complaint submitted successfully",
        complaint=ComplaintCreated(id=complaint.id, created_at=complaint.created_at),
    )


@router.get("/public", response_model=PublicComplaintList, summary="Public complaint feed")
def list_public_complaints(
    db: DbSession,
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(100, ge=0),
    offset: int = Query(0, ge=0),
):
    page = complaint_service.list_complaints(
        db, ComplaintFilter(status=status_filter), limit=limit, offset=offset
    )
    return {
        "complaints": page.items,
        "stats": page.stats,
        "pagination": Pagination(limit=limit, offset=offset, total=page.total),
    }


@router.get("/my", response_model=MyComplaintList, summary="Complaints of the current user")
def list_my_complaints(
    user: CurrentUser,
    db: DbSession,
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=0),
    offset: int = Query(0, ge=0),
):
    page = complaint_service.list_complaints(
        db,
        ComplaintFilter(status=status_filter, owner_id=user.id),
        limit=limit,
        offset=offset,
        owner_fields=(),
    )
    return {
        "complaints": page.items,
        "stats": page.stats,
        "pagination": Pagination(limit=limit, offset=offset, total=page.total),
    }


@router.get("/{complaint_id}", response_model=ComplaintDetailResponse, summary="Complaint details")
def get_complaint(complaint_id: int, db: DbSession):
    return {"complaint": complaint_service.get_complaint(db, complaint_id)}


@router.put("/{complaint_id}", response_model=ComplaintResponse, summary="Edit a complaint")
async def update_complaint(
    complaint_id: int,
    db: DbSession,
    uploads: Uploads,
    user=Depends(owner_or_admin),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location_address: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
):
    """
    Owner or admin edit of the non-status fields; status is admin-only via
    ``PATCH /admin/complaints/{id}/status``.
    """
    pending = await read_optional_upload(photo, UploadKind.COMPLAINT)
    complaint = await run_in_threadpool(
        _edit,
        db,
        uploads,
        complaint_id,
        name=name,
        description=description,
        location_address=location_address,
        photo=pending,
    )
    return ComplaintResponse(
        message="Complaint updated successfully",
        complaint=ComplaintRead.model_validate(complaint),
    )


@router.delete("/{complaint_id}", response_model=MessageResponse, summary="Delete a complaint")
def delete_complaint(
    complaint_id: int,
    db: DbSession,
    uploads: Uploads,
    user=Depends(owner_or_admin),
):
    photo_url = complaint_service.delete_complaint(db, complaint_id)
    uploads.remove(photo_url)
    return MessageResponse(message="Complaint deleted successfully")
