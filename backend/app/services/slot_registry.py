"""Module: slot_registry."""

import logging
from datetime import time

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AlreadyBooked, Forbidden, NotBooked, NotFound
from app.db.base import utcnow
from app.db.models.audit_log import record
from app.db.models.time_slot import TimeSlot
from app.db.models.user import User

logger = logging.getLogger(__name__)


def slot_id_for(start: time) -> str:
    return f"slot-{start.hour}-{start.minute:02d}"


def slot_label(start: time) -> str:
    hour = start.hour % 12 or 12
    suffix = "AM" if start.hour < 12 else "PM"
    return f"{hour}:{start.minute:02d} {suffix}"


def daily_schedule(
    start_hour: int | None = None,
    end_hour: int | None = None,
    interval_minutes: int | None = None,
) -> list[time]:
    """Slot start times from start_hour up to, not including, end_hour."""
    start_hour = settings.slot_day_start_hour if start_hour is None else start_hour
    end_hour = settings.slot_day_end_hour if end_hour is None else end_hour
    interval_minutes = interval_minutes or settings.slot_interval_minutes

    starts = []
    minutes = start_hour * 60
    while minutes < end_hour * 60:
        starts.append(time(minutes // 60, minutes % 60))
        minutes += interval_minutes
    return starts


def ensure_schedule(db: Session) -> int:
    existing = set(db.execute(select(TimeSlot.slot_id)).scalars().all())
    created = 0
    for start in daily_schedule():
        slot_id = slot_id_for(start)
        if slot_id in existing:
            continue
        db.add(TimeSlot(slot_id=slot_id, label=slot_label(start), start_time=start, is_booked=False))
        created += 1
    if created:
        db.flush()
        logger.info("Created %s time slot(s)", created)
    return created


def list_slots(db: Session) -> list[TimeSlot]:
    return db.execute(select(TimeSlot).order_by(TimeSlot.start_time)).scalars().all()


def _get_slot(db: Session, slot_id: str) -> TimeSlot:
    slot = db.get(TimeSlot, slot_id)
    if slot is None:
        raise NotFound(f"Time slot {slot_id} not found")
    return slot


def book(db: Session, slot_id: str, identity: User, display_name: str | None = None) -> TimeSlot:
    slot = _get_slot(db, slot_id)
    if slot.is_booked:
        raise AlreadyBooked()

    result = db.execute(
        update(TimeSlot)
        .where(TimeSlot.slot_id == slot_id, TimeSlot.is_booked.is_(False))
        .values(
            is_booked=True,
            booked_by_user_id=identity.user_id,
            booked_by_name=(display_name or "").strip() or identity.name,
            booked_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise AlreadyBooked()
    db.refresh(slot)
    record(db, identity.user_id, "slot.booked", "time_slot", slot_id)

    logger.info("Slot %s booked by %s", slot_id, identity.user_id)
    return slot


def cancel(db: Session, slot_id: str, identity: User) -> TimeSlot:
    slot = _get_slot(db, slot_id)
    if not slot.is_booked:
        raise NotBooked()
    if slot.booked_by_user_id != identity.user_id:
        raise Forbidden("You can only cancel your own booking")

    result = db.execute(
        update(TimeSlot)
        .where(
            TimeSlot.slot_id == slot_id,
            TimeSlot.is_booked.is_(True),
            TimeSlot.booked_by_user_id == identity.user_id,
        )
        .values(is_booked=False, booked_by_user_id=None, booked_by_name=None, booked_at=None)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotBooked()
    db.refresh(slot)
    record(db, identity.user_id, "slot.cancelled", "time_slot", slot_id)

    logger.info("Slot %s cancelled by %s", slot_id, identity.user_id)
    return slot
