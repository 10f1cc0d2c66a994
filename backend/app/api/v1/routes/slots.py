"""Module: slots."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.v1.routes.deps import get_current_user, get_db
from app.db.models.time_slot import TimeSlot
from app.db.models.user import User
from app.services import slot_registry

router = APIRouter()


class BookingRequest(BaseModel):
    # Name shown on the slot; defaults to the caller's own name.
    name: str | None = None


def slot_to_dict(slot: TimeSlot) -> dict:
    return {
        "slot_id": slot.slot_id,
        "time": slot.label,
        "start_time": slot.start_time.strftime("%H:%M"),
        "is_booked": slot.is_booked,
        "booked_by": str(slot.booked_by_user_id) if slot.booked_by_user_id else None,
        "booked_by_name": slot.booked_by_name,
        "booked_at": slot.booked_at,
    }


@router.get("", summary="Daily time slots with booking state")
def list_slots(db: Session = Depends(get_db)):
    return [slot_to_dict(slot) for slot in slot_registry.list_slots(db)]


@router.post("/{slot_id}/book", summary="Book a time slot")
def book_slot(
    slot_id: str,
    payload: BookingRequest | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    slot = slot_registry.book(db, slot_id, user, display_name=payload.name if payload else None)
    db.commit()
    return slot_to_dict(slot)


@router.post("/{slot_id}/cancel", summary="Cancel your own booking")
def cancel_slot(slot_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    slot = slot_registry.cancel(db, slot_id, user)
    db.commit()
    return slot_to_dict(slot)
