"""Module: leaves."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.v1.routes.deps import get_current_user, get_db, parse_uuid, resolve_period
from app.db.models.leave_application import LEAVE_TYPES, LeaveApplication
from app.db.models.user import User
from app.services import leave_workflow, reporting

router = APIRouter()

LEAVE_TYPE_LABELS = {
    "casual": "Casual Leave",
    "sick": "Sick Leave",
    "emergency": "Emergency Leave",
    "other": "Other Leave",
}


class LeaveApplyRequest(BaseModel):
    # Optional at the schema level so a missing field is reported as a domain validation error.
    start_date: date | None = None
    end_date: date | None = None
    leave_type: str | None = None
    reason: str | None = None
    attachments: list[str] = []


class LeaveReviewRequest(BaseModel):
    comments: str = ""


def leave_to_dict(leave: LeaveApplication, applicant: User | None = None) -> dict:
    return {
        "leave_id": str(leave.leave_id),
        "employee_id": str(leave.employee_id),
        "employee_name": applicant.name if applicant else None,
        "employee_department": applicant.department if applicant else None,
        "start_date": leave.start_date,
        "end_date": leave.end_date,
        "leave_type": leave.leave_type,
        "reason": leave.reason,
        "attachments": leave.attachments or [],
        "status": leave.status,
        "days_count": leave.days_count,
        "applied_at": leave.applied_at,
        "reviewed_by": str(leave.reviewed_by) if leave.reviewed_by else None,
        "reviewed_at": leave.reviewed_at,
        "review_comments": leave.review_comments,
    }


# Endpoint: static catalogue used to populate the application form.
@router.get("/types", summary="Leave categories")
def leave_types():
    return [{"value": value, "label": LEAVE_TYPE_LABELS[value]} for value in LEAVE_TYPES]


@router.get("", summary="Leave applications visible to the caller")
def list_leaves(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [leave_to_dict(leave, applicant) for leave, applicant in leave_workflow.list_for(db, user)]


@router.post("/apply", summary="Apply for leave", status_code=201)
def apply_leave(
    payload: LeaveApplyRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    leave = leave_workflow.submit(
        db,
        user,
        start_date=payload.start_date,
        end_date=payload.end_date,
        leave_type=payload.leave_type,
        reason=payload.reason,
        attachments=payload.attachments,
    )
    db.commit()
    return leave_to_dict(leave, user)


@router.get("/stats", summary="Monthly leave statistics")
def leave_stats(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    year, month = resolve_period(year, month)
    return reporting.monthly_stats(db, user, year, month)


@router.get("/calendar", summary="Leave calendar for a month")
def leave_calendar(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    year, month = resolve_period(year, month)
    return {
        "year": year,
        "month": month,
        "days": [
            {
                "date": day["date"],
                "leaves": [leave_to_dict(leave, applicant) for leave, applicant in day["leaves"]],
            }
            for day in reporting.leave_calendar(db, user, year, month)
        ],
    }


@router.get("/{leave_id}", summary="Single leave application")
def get_leave(leave_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    leave, applicant = leave_workflow.get(db, parse_uuid(leave_id, "leave_id"), user)
    return leave_to_dict(leave, applicant)


@router.put("/{leave_id}/approve", summary="Approve leave (HOD/Principal)")
def approve_leave(
    leave_id: str,
    payload: LeaveReviewRequest | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comments = payload.comments if payload else ""
    leave = leave_workflow.approve(db, parse_uuid(leave_id, "leave_id"), user, comments)
    db.commit()
    return leave_to_dict(leave, db.get(User, leave.employee_id))


@router.put("/{leave_id}/reject", summary="Reject leave (HOD/Principal)")
def reject_leave(
    leave_id: str,
    payload: LeaveReviewRequest | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comments = payload.comments if payload else ""
    leave = leave_workflow.reject(db, parse_uuid(leave_id, "leave_id"), user, comments)
    db.commit()
    return leave_to_dict(leave, db.get(User, leave.employee_id))
