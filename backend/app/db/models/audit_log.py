"""Module: audit_log."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


# Stores immutable audit trail entries for leave decisions and slot bookings.
class AuditLog(Base):
    __tablename__ = "audit_log"

    audit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )

    actor_user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # leave.submitted, leave.approved, leave.rejected, slot.booked, slot.cancelled
    action: Mapped[str] = mapped_column(String, nullable=False)
    target_type: Mapped[str] = mapped_column(String, nullable=False)
    target_id: Mapped[str] = mapped_column(String, nullable=False)
    meta: Mapped[dict] = mapped_column(JSON, default=dict)

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow
    )


def record(db, actor_user_id: uuid.UUID, action: str, target_type: str, target_id, **meta) -> AuditLog:
    entry = AuditLog(
        actor_user_id=actor_user_id,
        action=action,
        target_type=target_type,
        target_id=str(target_id),
        meta=meta,
    )
    db.add(entry)
    db.flush()
    return entry
