# File: tazasu/services/user_service.py

"""
Credential store: persistence of user accounts.

Emails are normalised (trimmed, lower-cased) before every read and write, so
lookups and the unique index are case-insensitive.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tazasu.core.errors import DuplicateEmail, NoFieldsProvided, NotFoundError
from tazasu.models.complaint import Complaint
from tazasu.models.user import ROLE_ADMIN, ROLE_USER, ROLES, User
from tazasu.services.query_builder import SearchPredicate, build_list_query, apply_filters

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    password_hash: str,
    phone: Optional[str] = None,
    avatar_url: Optional[str] = None,
    role: str = ROLE_USER,
) -> User:
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role!r}")

    email = normalize_email(email)
    if get_user_by_email(db, email) is not None:
        raise DuplicateEmail(email)

    user = User(
        name=name.strip(),
        email=email,
        password_hash=password_hash,
        phone=phone or None,
        avatar_url=avatar_url,
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same address.
        db.rollback()
        raise DuplicateEmail(email)
    db.refresh(user)
    return user


def _require_user(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_profile(
    db: Session,
    user_id: int,
    *,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    avatar_url: Optional[str] = None,
) -> User:
    """
    Apply the supplied profile fields.

    A blank ``name`` is ignored; ``phone=""`` clears the stored phone while
    ``phone=None`` leaves it alone. Role is not editable here.
    """
    user = _require_user(db, user_id)

    changed = False
    if name is not None and name.strip():
        user.name = name.strip()
        changed = True
    if phone is not None:
        user.phone = phone.strip() or None
        changed = True
    if avatar_url:
        user.avatar_url = avatar_url
        changed = True

    if not changed:
        raise NoFieldsProvided()

    user.updated_at = func.now()
    db.commit()
    db.refresh(user)
    return user


def update_password(db: Session, user_id: int, password_hash: str) -> User:
    user = _require_user(db, user_id)
    user.password_hash = password_hash
    user.updated_at = func.now()
    db.commit()
    db.refresh(user)
    return user


def set_role(db: Session, user_id: int, role: str) -> User:
    """Administrative role change (seeding and operator tooling only)."""
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role!r}")
    user = _require_user(db, user_id)
    user.role = role
    user.updated_at = func.now()
    db.commit()
    db.refresh(user)
    return user


# ---------- Admin views ----------

def list_users(
    db: Session,
    *,
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[dict], int]:
    """
    Page of users with their complaint counts, newest first, plus the number
    of users matching ``search`` (name or email substring).
    """
    complaints_count = (
        select(func.count(Complaint.id))
        .where(Complaint.user_id == User.id)
        .correlate(User)
        .scalar_subquery()
        .label("complaints_count")
    )
    predicates = [SearchPredicate(columns=(User.name, User.email), term=search)]

    stmt = build_list_query(
        select(User, complaints_count),
        predicates,
        order_by=(User.created_at.desc(), User.id.desc()),
        limit=limit,
        offset=offset,
    )
    rows = db.execute(stmt).all()
    total = db.scalar(apply_filters(select(func.count()).select_from(User), predicates))

    items = [
        {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
            "role": user.role,
            "avatar_url": user.avatar_url,
            "created_at": user.created_at,
            "complaints_count": count,
        }
        for user, count in rows
    ]
    return items, int(total or 0)


def user_stats(db: Session) -> dict:
    # Windows count back from midnight, like the complaint counters.
    today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    week_ago = today - timedelta(days=7)
    month_ago = today - timedelta(days=30)
    row = db.execute(
        select(
            func.count(User.id).label("total_users"),
            func.count(case((User.role == ROLE_ADMIN, 1))).label("admins"),
            func.count(case((User.created_at >= week_ago, 1))).label("new_this_week"),
            func.count(case((User.created_at >= month_ago, 1))).label("new_this_month"),
        )
    ).one()
    return dict(row._mapping)
