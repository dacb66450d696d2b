# File: tazasu/schemas/complaint.py

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from tazasu.schemas.common import Pagination

ComplaintStatus = Literal["pending", "in_progress", "resolved"]


class ComplaintRead(BaseModel):
    id: int
    user_id: int
    name: str
    location_lat: float
    location_lng: float
    location_address: Optional[str] = None
    description: str
    photo_url: Optional[str] = None
    status: ComplaintStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ComplaintPublic(ComplaintRead):
    user_name: str


class ComplaintDetail(ComplaintRead):
    user_name: str
    user_email: str


class ComplaintAdmin(ComplaintDetail):
    user_phone: Optional[str] = None


class ComplaintCreated(BaseModel):
    id: int
    created_at: datetime


class ComplaintCreateResponse(BaseModel):
    success: bool = True
    message: str
    complaint: ComplaintCreated


class ComplaintResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    complaint: ComplaintRead


class ComplaintDetailResponse(BaseModel):
    success: bool = True
    complaint: ComplaintDetail


class StatusStats(BaseModel):
    total: int
    pending: int
    in_progress: int
    resolved: int


class AdminStatusStats(StatusStats):
    this_week: int
    this_month: int


class PublicComplaintList(BaseModel):
    success: bool = True
    complaints: list[ComplaintPublic]
    stats: StatusStats
    pagination: Pagination


class MyComplaintList(BaseModel):
    success: bool = True
    complaints: list[ComplaintRead]
    stats: StatusStats
    pagination: Pagination


class AdminComplaintList(BaseModel):
    success: bool = True
    complaints: list[ComplaintAdmin]
    stats: AdminStatusStats
    pagination: Pagination


class StatusUpdate(BaseModel):
    # Plain str so unknown values reach the store and fail with InvalidStatus.
    status: str
