# File: tazasu/api/deps.py

"""
Request-scoped dependencies: database session, settings, upload storage and
the access control guard.

The guard never trusts the role or identity embedded in the token. Every
authenticated request re-reads the user row, so a demoted or deleted account
loses its privileges on the next request even while its token is still
valid.
"""

import logging
from collections.abc import Callable, Generator
from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from tazasu.core.config import Settings
from tazasu.core.errors import (
    AuthError,
    ForbiddenError,
    MissingToken,
    NotFoundError,
    UserNotFound,
)
from tazasu.core.security import decode_access_token
from tazasu.models.user import User
from tazasu.services import complaint_service, user_service
from tazasu.services.upload_service import UploadStorage

logger = logging.getLogger(__name__)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a SQLAlchemy session from the
    application's ``Database``.

    Usage in route functions:
        db: Session = Depends(get_db)
    """
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_uploads(request: Request) -> UploadStorage:
    return request.app.state.uploads


DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Uploads = Annotated[UploadStorage, Depends(get_uploads)]


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(request: Request, db: DbSession, settings: AppSettings) -> User:
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise MissingToken()

    try:
        claims = decode_access_token(token, settings)
    except AuthError as exc:
        # Invalid and expired tokens are reported as 403 with distinct reasons.
        raise ForbiddenError(exc.message, details={"reason": exc.code})

    user = user_service.get_user_by_id(db, claims["userId"])
    if user is None:
        raise UserNotFound()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_admin(user: CurrentUser) -> User:
    if not user.is_admin:
        raise ForbiddenError("Administrator rights required")
    return user


AdminUser = Annotated[User, Depends(require_admin)]


# Resource kind -> loader returning the owning user id (None when absent).
OWNER_LOADERS: dict[str, Callable[[Session, int], Optional[int]]] = {
    "complaint": complaint_service.get_owner_id,
}


def require_ownership(resource: str = "complaint", id_param: str = "complaint_id"):
    """
    Build a dependency that admits admins and the resource's owner.

    The returned dependency depends on ``get_current_user``, so it always runs
    after authentication. Unknown resource kinds fail when the route is
    declared.
    """
    try:
        load_owner = OWNER_LOADERS[resource]
    except KeyError:
        raise ValueError(f"No ownership loader registered for {resource!r}")

    def dependency(request: Request, user: CurrentUser, db: DbSession) -> User:
        if user.is_admin:
            return user

        raw_id = request.path_params.get(id_param)
        try:
            resource_id = int(raw_id)
        except (TypeError, ValueError):
            raise NotFoundError("Resource not found")

        owner_id = load_owner(db, resource_id)
        if owner_id is None:
            raise NotFoundError("Resource not found")
        if owner_id != user.id:
            logger.info(
                "User %s denied access to %s %s owned by %s",
                user.id, resource, resource_id, owner_id,
            )
            raise ForbiddenError("You do not have access to this resource")
        return user

    return dependency
