# File: tazasu/schemas/common.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UpdateRead(BaseModel):
    id: int
    title: str
    description: str
    created_at: datetime

    class Config:
        from_attributes = True


class UpdateList(BaseModel):
    updates: list[UpdateRead]


class StoredFileRead(BaseModel):
    url: str
    filename: str
    originalName: Optional[str] = None
    size: int
    mimetype: str


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    file: StoredFileRead


class MultiUploadResponse(BaseModel):
    success: bool = True
    message: str
    files: list[StoredFileRead]
