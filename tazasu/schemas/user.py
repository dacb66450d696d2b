# File: tazasu/schemas/user.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):
    email: EmailStr


class UserCreate(UserBase):
    name: str = Field(min_length=1, max_length=255)
    password: str
    phone: Optional[str] = Field(default=None, max_length=20)


class LoginRequest(UserBase):
    password: str = Field(min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=1)

    class Config:
        populate_by_name = True


class UserRead(BaseModel):
    """Public projection of a user; never carries the password hash."""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # Pydantic v2: replaces orm_mode


class AdminUserRead(UserRead):
    complaints_count: int = 0


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    user: UserRead


class UserEnvelope(BaseModel):
    user: UserRead


class ProfileResponse(BaseModel):
    success: bool = True
    message: str
    user: UserRead
