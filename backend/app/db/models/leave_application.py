"""Module: leave_application."""

import uuid
from datetime import date, datetime

from sqlalchemy import JSON, CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow

LEAVE_TYPES = ("casual", "sick", "emergency", "other")
LEAVE_STATUSES = ("pending", "approved", "rejected")


class LeaveApplication(Base):
    __tablename__ = "leave_applications"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_leave_applications_range"),
        CheckConstraint("days_count >= 1", name="ck_leave_applications_days"),
        CheckConstraint(
            "leave_type IN ('casual', 'sick', 'emergency', 'other')",
            name="ck_leave_applications_type",
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_leave_applications_status",
        ),
    )

    leave_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    leave_type: Mapped[str] = mapped_column(String, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    # File names or URLs supplied with the application; stored as given.
    attachments: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    days_count: Mapped[int] = mapped_column(Integer, nullable=False)

    applied_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    review_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
