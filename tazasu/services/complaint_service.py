# File: tazasu/services/complaint_service.py

"""
Complaint store.

Holds the complaint lifecycle: creation (always ``pending``), listing with
filters and per-status aggregates, owner/admin edits, admin status changes
and deletion. Status ordering is deliberately not enforced; an admin may set
any of the three values from any other.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from tazasu.core.config import Settings
from tazasu.core.errors import InvalidStatus, NoFieldsProvided, NotFoundError, ValidationError
from tazasu.models.complaint import STATUSES, STATUS_PENDING, Complaint
from tazasu.models.user import User
from tazasu.services.query_builder import (
    OwnerPredicate,
    Predicate,
    SearchPredicate,
    StatusPredicate,
    apply_filters,
    build_list_query,
)

logger = logging.getLogger(__name__)

COMPLAINT_COLUMNS = (
    "id",
    "user_id",
    "name",
    "location_lat",
    "location_lng",
    "location_address",
    "description",
    "photo_url",
    "status",
    "created_at",
    "updated_at",
)


@dataclass
class ComplaintFilter:
    status: Optional[str] = None
    search: Optional[str] = None
    owner_id: Optional[int] = None

    def predicates(self, include_status: bool = True) -> list[Predicate]:
        predicates: list[Predicate] = []
        if include_status:
            predicates.append(
                StatusPredicate(column=Complaint.status, value=self.status, allowed=STATUSES)
            )
        predicates.append(
            SearchPredicate(
                columns=(Complaint.name, Complaint.description, Complaint.location_address),
                term=self.search,
            )
        )
        predicates.append(OwnerPredicate(column=Complaint.user_id, owner_id=self.owner_id))
        return predicates


@dataclass
class ComplaintPage:
    items: list[dict]
    stats: dict
    total: int
    limit: int
    offset: int


def complaint_to_dict(complaint: Complaint) -> dict:
    return {column: getattr(complaint, column) for column in COMPLAINT_COLUMNS}


def check_coordinates(lat: float, lng: float, settings: Settings) -> None:
    """Reject coordinates outside the world or the configured bounding box."""
    if not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
        raise ValidationError("Invalid coordinates", field="location")
    if not (
        settings.geo_min_lat <= lat <= settings.geo_max_lat
        and settings.geo_min_lng <= lng <= settings.geo_max_lng
    ):
        raise ValidationError(
            "Coordinates must be within the service region", field="location"
        )


def create_complaint(
    db: Session,
    settings: Settings,
    *,
    owner_id: int,
    name: str,
    lat: float,
    lng: float,
    description: str,
    address: Optional[str] = None,
    photo_url: Optional[str] = None,
) -> Complaint:
    name = (name or "").strip()
    description = (description or "").strip()
    if not name or not description:
        raise ValidationError("Name, description and coordinates are required")
    check_coordinates(lat, lng, settings)

    complaint = Complaint(
        user_id=owner_id,
        name=name,
        location_lat=lat,
        location_lng=lng,
        location_address=(address or "").strip() or None,
        description=description,
        photo_url=photo_url,
        status=STATUS_PENDING,
    )
    db.add(complaint)
    db.commit()
    db.refresh(complaint)
    logger.info("Complaint %s created by user %s", complaint.id, owner_id)
    return complaint


def get_owner_id(db: Session, complaint_id: int) -> Optional[int]:
    return db.scalar(select(Complaint.user_id).where(Complaint.id == complaint_id))


def _require_complaint(db: Session, complaint_id: int) -> Complaint:
    complaint = db.get(Complaint, complaint_id)
    if complaint is None:
        raise NotFoundError("Complaint not found")
    return complaint


def get_complaint(db: Session, complaint_id: int) -> dict:
    """Complaint joined with its owner's public name and email."""
    row = db.execute(
        select(Complaint, User.name, User.email)
        .join(User, Complaint.user_id == User.id)
        .where(Complaint.id == complaint_id)
    ).first()
    if row is None:
        raise NotFoundError("Complaint not found")

    complaint, user_name, user_email = row
    data = complaint_to_dict(complaint)
    data["user_name"] = user_name
    data["user_email"] = user_email
    return data


def status_counts(db: Session, predicates: list[Predicate], windows: bool = False) -> dict:
    """
    Per-status tallies over the rows matching ``predicates``.

    With ``windows`` the result also carries ``this_week`` / ``this_month``
    counts of recently created complaints.
    """
    columns = [
        func.count(Complaint.id).label("total"),
        *(
            func.count(case((Complaint.status == status, 1))).label(status)
            for status in STATUSES
        ),
    ]
    if windows:
        today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        columns.append(
            func.count(case((Complaint.created_at >= today - timedelta(days=7), 1))).label(
                "this_week"
            )
        )
        columns.append(
            func.count(case((Complaint.created_at >= today - timedelta(days=30), 1))).label(
                "this_month"
            )
        )

    row = db.execute(apply_filters(select(*columns), predicates)).one()
    return {key: int(value or 0) for key, value in row._mapping.items()}


def list_complaints(
    db: Session,
    filters: ComplaintFilter,
    *,
    limit: int,
    offset: int,
    owner_fields: tuple[str, ...] = ("name",),
    stats_windows: bool = False,
) -> ComplaintPage:
    """
    Page of complaints, newest first.

    ``total`` counts every row matching the full filter (not just the page);
    ``stats`` tallies statuses over the same scope without the status filter,
    so the counters stay meaningful while a single status is selected.
    ``owner_fields`` picks which owner columns are joined in as ``user_<field>``.
    """
    owner_columns = [getattr(User, field).label(f"user_{field}") for field in owner_fields]
    predicates = filters.predicates()

    base = select(Complaint, *owner_columns).join(User, Complaint.user_id == User.id)
    stmt = build_list_query(
        base,
        predicates,
        order_by=(Complaint.created_at.desc(), Complaint.id.desc()),
        limit=limit,
        offset=offset,
    )

    items = []
    for row in db.execute(stmt).all():
        data = complaint_to_dict(row[0])
        for field, value in zip(owner_fields, row[1:]):
            data[f"user_{field}"] = value
        items.append(data)

    total = db.scalar(
        apply_filters(select(func.count(Complaint.id)), predicates)
    )
    stats = status_counts(db, filters.predicates(include_status=False), windows=stats_windows)

    return ComplaintPage(
        items=items, stats=stats, total=int(total or 0), limit=limit, offset=offset
    )


def update_complaint(
    db: Session,
    complaint_id: int,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    location_address: Optional[str] = None,
    photo_url: Optional[str] = None,
) -> Complaint:
    """
    Edit the non-status fields of a complaint.

    Blank ``name``/``description`` are ignored; ``location_address=""`` clears
    the address. Raises ``NotFoundError`` for an unknown id before looking at
    the fields, then ``NoFieldsProvided`` when nothing would change.
    """
    complaint = _require_complaint(db, complaint_id)

    changes: dict[str, Any] = {}
    if name is not None and name.strip():
        changes["name"] = name.strip()
    if description is not None and description.strip():
        changes["description"] = description.strip()
    if location_address is not None:
        changes["location_address"] = location_address.strip() or None
    if photo_url:
        changes["photo_url"] = photo_url

    if not changes:
        raise NoFieldsProvided()

    for field, value in changes.items():
        setattr(complaint, field, value)
    complaint.updated_at = func.now()
    db.commit()
    db.refresh(complaint)
    logger.info("Complaint %s updated (%s)", complaint_id, ", ".join(changes))
    return complaint


def set_status(db: Session, complaint_id: int, status: str) -> Complaint:
    if status not in STATUSES:
        raise InvalidStatus(status)

    complaint = _require_complaint(db, complaint_id)
    previous = complaint.status
    complaint.status = status
    complaint.updated_at = func.now()
    db.commit()
    db.refresh(complaint)
    logger.info("Complaint %s status %s -> %s", complaint_id, previous, status)
    return complaint


def delete_complaint(db: Session, complaint_id: int) -> Optional[str]:
    """Delete the complaint and return its photo URL (if any) for cleanup."""
    complaint = _require_complaint(db, complaint_id)
    photo_url = complaint.photo_url
    db.delete(complaint)
    db.commit()
    logger.info("Complaint %s deleted", complaint_id)
    return photo_url


# ---------- Dashboard ----------

def daily_counts(db: Session, days: int = 7) -> list[dict]:
    today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    day = func.date(Complaint.created_at)
    rows = db.execute(
        select(day.label("date"), func.count(Complaint.id).label("complaints_count"))
        .where(Complaint.created_at >= today - timedelta(days=days))
        .group_by(day)
        .order_by(day.desc())
    ).all()
    return [{"date": str(date), "complaints_count": count} for date, count in rows]


def top_regions(db: Session, limit: int = 10) -> list[dict]:
    count = func.count(Complaint.id)
    rows = db.execute(
        select(Complaint.location_address, count.label("complaints_count"))
        .where(Complaint.location_address.is_not(None))
        .group_by(Complaint.location_address)
        .order_by(count.desc())
        .limit(limit)
    ).all()
    return [
        {"location_address": address, "complaints_count": n} for address, n in rows
    ]
