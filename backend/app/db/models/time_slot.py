"""Module: time_slot."""

import uuid
from datetime import datetime, time

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


# Fixed daily booking schedule; rows are created once and only toggle state.
class TimeSlot(Base):
    __tablename__ = "time_slots"
    __table_args__ = (
        CheckConstraint(
            "(is_booked AND booked_by_user_id IS NOT NULL) OR "
            "(NOT is_booked AND booked_by_user_id IS NULL)",
            name="ck_time_slots_owner",
        ),
    )

    # "slot-<hour>-<minute:02d>", e.g. slot-9-30
    slot_id: Mapped[str] = mapped_column(String, primary_key=True)
    label: Mapped[str] = mapped_column(String, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False, unique=True)

    is_booked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    booked_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True
    )
    booked_by_name: Mapped[str | None] = mapped_column(String, nullable=True)
    booked_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
