# File: tazasu/api/v1/routes_auth.py

"""
Auth API routes: registration, login, current user, profile and password.
"""

from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from tazasu.api.deps import AppSettings, CurrentUser, DbSession, Uploads
from tazasu.core.config import Settings
from tazasu.core.errors import DuplicateEmail, ValidationError
from tazasu.core.security import create_access_token
from tazasu.schemas.common import MessageResponse
from tazasu.schemas.user import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    ProfileResponse,
    UserCreate,
    UserEnvelope,
    UserRead,
)
from tazasu.models.user import User
from tazasu.services import auth_service, user_service
from tazasu.services.upload_service import (
    PendingUpload,
    UploadKind,
    UploadStorage,
    read_optional_upload,
)

router = APIRouter()


def _issue_token(user, settings) -> str:
    return create_access_token(user.id, user.email, user.role, settings)


# Store work and bcrypt run in the threadpool; only the upload read stays on the loop.

def _create_account(
    db: Session,
    settings: Settings,
    uploads: UploadStorage,
    payload: UserCreate,
    avatar: Optional[PendingUpload],
) -> User:
    if user_service.get_user_by_email(db, payload.email) is not None:
        # Checked before the avatar is written so rejected sign-ups leave no files.
        raise DuplicateEmail(payload.email)

    stored = uploads.store(avatar) if avatar else None
    return auth_service.register_user(
        db,
        settings,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        phone=payload.phone,
        avatar_url=stored.url if stored else None,
    )


def _apply_profile(
    db: Session,
    uploads: UploadStorage,
    user_id: int,
    name: Optional[str],
    phone: Optional[str],
    avatar: Optional[PendingUpload],
) -> User:
    stored = uploads.store(avatar) if avatar else None
    return user_service.update_profile(
        db,
        user_id,
        name=name,
        phone=phone,
        avatar_url=stored.url if stored else None,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    db: DbSession,
    settings: AppSettings,
    uploads: Uploads,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    phone: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
):
    """
    Multipart registration with an optional avatar image.

    Returns a session token together with the new user.
    """
    if not name.strip() or not email.strip() or not password:
        raise ValidationError("Name, email and password are required")
    auth_service.check_password_policy(password, settings)
    try:
        payload = UserCreate(name=name.strip(), email=email.strip(), password=password, phone=phone)
    except PydanticValidationError as exc:
        field = str(exc.errors()[0]["loc"][0])
        message = "Invalid email format" if field == "email" else f"Invalid {field}"
        raise ValidationError(message, field=field)

    pending = await read_optional_upload(avatar, UploadKind.AVATAR)
    user = await run_in_threadpool(_create_account, db, settings, uploads, payload, pending)
    return AuthResponse(
        message="Registration successful",
        token=_issue_token(user, settings),
        user=UserRead.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse, summary="User login")
def login(payload: LoginRequest, db: DbSession, settings: AppSettings):
    user = auth_service.authenticate_user(
        db, settings, email=payload.email, password=payload.password
    )
    return AuthResponse(
        message="Login successful",
        token=_issue_token(user, settings),
        user=UserRead.model_validate(user),
    )


@router.get("/me", response_model=UserEnvelope, summary="Current user")
def me(user: CurrentUser):
    return UserEnvelope(user=UserRead.model_validate(user))


@router.put("/profile", response_model=ProfileResponse, summary="Update own profile")
async def update_profile(
    user: CurrentUser,
    db: DbSession,
    uploads: Uploads,
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
):
    """
    Update name, phone and/or avatar. Role and email are not editable here.
    """
    pending = await read_optional_upload(avatar, UploadKind.AVATAR)
    updated = await run_in_threadpool(_apply_profile, db, uploads, user.id, name, phone, pending)
    return ProfileResponse(
        message="Profile updated successfully",
        user=UserRead.model_validate(updated),
    )


@router.post("/change-password", response_model=MessageResponse, summary="Change password")
def change_password(
    payload: ChangePasswordRequest,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    auth_service.change_password(
        db,
        settings,
        user_id=user.id,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return MessageResponse(message="Password changed successfully")
