# File: tazasu/services/auth_service.py

"""
Authentication service.

Glue between the credential store and the security helpers:
  - registration (password policy, hashing, duplicate email check)
  - login (password verification)
  - password change
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from tazasu.core.config import Settings
from tazasu.core.errors import InvalidCredentials, NotFoundError, ValidationError
from tazasu.core.security import hash_password, verify_password
from tazasu.models.user import User
from tazasu.services import user_service

logger = logging.getLogger(__name__)


def check_password_policy(password: str, settings: Settings, field: str = "password") -> None:
    if len(password) < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters",
            field=field,
        )


def register_user(
    db: Session,
    settings: Settings,
    *,
    name: str,
    email: str,
    password: str,
    phone: Optional[str] = None,
    avatar_url: Optional[str] = None,
) -> User:
    """Create a regular user account. Registration can never grant admin."""
    if not name.strip():
        raise ValidationError("Name, email and password are required", field="name")
    check_password_policy(password, settings)

    user = user_service.create_user(
        db,
        name=name,
        email=email,
        password_hash=hash_password(password, settings),
        phone=phone,
        avatar_url=avatar_url,
    )
    logger.info("New user registered: %s", user.email)
    return user


def authenticate_user(
    db: Session,
    settings: Settings,
    *,
    email: str,
    password: str,
) -> User:
    """
    Look up a user by email and verify the password.

    Unknown email and wrong password raise the same ``InvalidCredentials``.
    """
    user = user_service.get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash, settings):
        raise InvalidCredentials()
    logger.info("User logged in: %s", user.email)
    return user


def change_password(
    db: Session,
    settings: Settings,
    *,
    user_id: int,
    current_password: str,
    new_password: str,
) -> User:
    check_password_policy(new_password, settings, field="newPassword")

    user = user_service.get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if not verify_password(current_password, user.password_hash, settings):
        raise ValidationError("Current password is incorrect", field="currentPassword")

    user = user_service.update_password(db, user_id, hash_password(new_password, settings))
    logger.info("Password changed for user: %s", user.email)
    return user
