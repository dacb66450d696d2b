# File: tazasu/models/complaint.py

"""
Complaint model.

A water-quality complaint submitted by a user. Status moves through
pending -> in_progress -> resolved, but any status may be set directly by an
admin; the ordering is not enforced here.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tazasu.models.base import Base

if TYPE_CHECKING:
    from tazasu.models.user import User

STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in_progress"
STATUS_RESOLVED = "resolved"
STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_RESOLVED)


class Complaint(Base):
    __tablename__ = "complaints"
    __table_args__ = (
        CheckConstraint("location_lat BETWEEN -90 AND 90", name="ck_complaints_lat"),
        CheckConstraint("location_lng BETWEEN -180 AND 180", name="ck_complaints_lng"),
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'resolved')", name="ck_complaints_status"
        ),
        Index("idx_complaints_location", "location_lat", "location_lng"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    location_lat: Mapped[float] = mapped_column(Numeric(10, 8, asdecimal=False), nullable=False)
    location_lng: Mapped[float] = mapped_column(Numeric(11, 8, asdecimal=False), nullable=False)
    location_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Public URL path of the stored photo, e.g. "/uploads/complaints/complaint-....jpg"
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=STATUS_PENDING,
        server_default=STATUS_PENDING,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    owner: Mapped["User"] = relationship(back_populates="complaints")
