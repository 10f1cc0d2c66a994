"""Module: reporting."""

import calendar as _calendar
from collections import Counter
from datetime import date, timedelta

from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.db.models.leave_application import LEAVE_STATUSES, LEAVE_TYPES, LeaveApplication
from app.db.models.user import User
from app.services.leave_workflow import visible_applications


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    last_day = _calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def monthly_stats(db: Session, identity: User, year: int, month: int) -> dict:
    first, last = month_bounds(year, month)
    rows = db.execute(
        visible_applications(identity).where(
            LeaveApplication.start_date >= first,
            LeaveApplication.start_date <= last,
        )
    ).all()

    by_status = Counter(leave.status for leave, _ in rows)
    by_type = Counter(leave.leave_type for leave, _ in rows)
    by_department = Counter(applicant.department for _, applicant in rows)

    employees: dict = {}
    for leave, applicant in rows:
        entry = employees.setdefault(
            applicant.user_id,
            {
                "employee_id": str(applicant.user_id),
                "name": applicant.name,
                "department": applicant.department,
                "count": 0,
            },
        )
        entry["count"] += 1
    top_employees = sorted(employees.values(), key=lambda e: (-e["count"], e["name"]))[:5]

    return {
        "year": year,
        "month": month,
        "total": len(rows),
        "by_status": {status: by_status.get(status, 0) for status in LEAVE_STATUSES},
        "by_leave_type": {leave_type: by_type.get(leave_type, 0) for leave_type in LEAVE_TYPES},
        "by_department": dict(sorted(by_department.items())),
        "days_approved": sum(leave.days_count for leave, _ in rows if leave.status == "approved"),
        "top_employees": top_employees,
    }


def leave_calendar(db: Session, identity: User, year: int, month: int) -> list[dict]:
    """Per-day listing of visible, non-rejected leave overlapping the month."""
    first, last = month_bounds(year, month)
    rows = db.execute(
        visible_applications(identity)
        .where(
            LeaveApplication.start_date <= last,
            LeaveApplication.end_date >= first,
            LeaveApplication.status != "rejected",
        )
        .order_by(LeaveApplication.start_date)
    ).all()

    days = []
    current = first
    while current <= last:
        days.append(
            {
                "date": current,
                "leaves": [
                    (leave, applicant)
                    for leave, applicant in rows
                    if leave.start_date <= current <= leave.end_date
                ],
            }
        )
        current += timedelta(days=1)
    return days
