"""Module: leave_workflow.

Leave application state machine: pending -> approved | rejected. Approval
charges the applicant's monthly balance for the month the leave starts in;
rejection never touches the ledger.
"""

import logging
import uuid
from datetime import date

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from app.core.errors import AlreadyProcessed, Forbidden, NotFound, ValidationError, InvalidRange, PastDate
from app.core.roles import Capability, has_capability, is_department_scoped, parse_role
from app.db.base import utcnow
from app.db.models.audit_log import record
from app.db.models.leave_application import LEAVE_TYPES, LeaveApplication
from app.db.models.user import User
from app.services import ledger

logger = logging.getLogger(__name__)


def days_between(start_date: date, end_date: date) -> int:
    # Both ends inclusive.
    return (end_date - start_date).days + 1


def visible_applications(identity: User):
    """
    Select (LeaveApplication, applicant User) rows the identity may see.

    Teachers see their own applications. Reviewers see everything, or only
    their department when their role is department scoped.
    """
    stmt = select(LeaveApplication, User).join(User, User.user_id == LeaveApplication.employee_id)
    role = parse_role(identity.role)
    if not has_capability(role, Capability.REVIEW_LEAVE):
        return stmt.where(LeaveApplication.employee_id == identity.user_id)
    if is_department_scoped(role):
        return stmt.where(User.department == identity.department)
    return stmt


def submit(
    db: Session,
    employee: User,
    start_date: date | None,
    end_date: date | None,
    leave_type: str | None,
    reason: str | None,
    attachments: list[str] | None = None,
    today: date | None = None,
) -> LeaveApplication:
    if not has_capability(parse_role(employee.role), Capability.APPLY_LEAVE):
        raise Forbidden("You are not allowed to apply for leave")

    leave_type = (leave_type or "").strip().lower()
    reason = (reason or "").strip()
    if start_date is None or end_date is None or not leave_type or not reason:
        raise ValidationError("Start date, end date, leave type, and reason are required")
    if leave_type not in LEAVE_TYPES:
        raise ValidationError(f"Unknown leave type '{leave_type}'. Use one of: {', '.join(LEAVE_TYPES)}")
    attachments = [item.strip() for item in attachments or [] if item and item.strip()]

    today = today or date.today()
    if start_date < today:
        raise PastDate()
    if end_date < start_date:
        raise InvalidRange()

    days_count = days_between(start_date, end_date)
    balance = ledger.balance_for(db, employee.user_id, start_date)
    ledger.ensure_available(balance, days_count, leave_type)

    leave = LeaveApplication(
        employee_id=employee.user_id,
        start_date=start_date,
        end_date=end_date,
        leave_type=leave_type,
        reason=reason,
        attachments=attachments,
        status="pending",
        days_count=days_count,
        applied_at=utcnow(),
    )
    db.add(leave)
    db.flush()
    record(
        db,
        employee.user_id,
        "leave.submitted",
        "leave_application",
        leave.leave_id,
        leave_type=leave_type,
        days=days_count,
    )

    logger.info(
        "Leave %s submitted by %s: %s %s..%s (%s day(s))",
        leave.leave_id,
        employee.user_id,
        leave_type,
        start_date,
        end_date,
        days_count,
    )
    return leave


def _load_for_review(db: Session, leave_id: uuid.UUID, reviewer: User) -> tuple[LeaveApplication, User]:
    role = parse_role(reviewer.role)
    if not has_capability(role, Capability.REVIEW_LEAVE):
        raise Forbidden("Only HOD or Principal can review leave applications")

    row = db.execute(
        select(LeaveApplication, User)
        .join(User, User.user_id == LeaveApplication.employee_id)
        .where(LeaveApplication.leave_id == leave_id)
    ).first()
    if row is None:
        raise NotFound("Leave application not found")
    leave, applicant = row

    if is_department_scoped(role) and applicant.department != reviewer.department:
        raise Forbidden("You can only review leaves for your department")
    if leave.status != "pending":
        raise AlreadyProcessed()
    return leave, applicant


def _transition(db: Session, leave: LeaveApplication, status: str, reviewer: User, comments: str | None) -> None:
    now = utcnow()
    result = db.execute(
        update(LeaveApplication)
        .where(
            LeaveApplication.leave_id == leave.leave_id,
            LeaveApplication.status == "pending",
        )
        .values(
            status=status,
            reviewed_by=reviewer.user_id,
            reviewed_at=now,
            review_comments=comments or "",
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise AlreadyProcessed()
    db.refresh(leave)


def approve(db: Session, leave_id: uuid.UUID, reviewer: User, comments: str | None = "") -> LeaveApplication:
    leave, applicant = _load_for_review(db, leave_id, reviewer)

    balance = ledger.balance_for(db, leave.employee_id, leave.start_date)
    ledger.apply_usage(db, balance, leave.leave_type, leave.days_count)
    _transition(db, leave, "approved", reviewer, comments)
    record(
        db,
        reviewer.user_id,
        "leave.approved",
        "leave_application",
        leave.leave_id,
        balance_id=balance.balance_id,
        days=leave.days_count,
    )

    logger.info(
        "Leave %s for %s approved by %s; %s now has %s day(s) remaining",
        leave.leave_id,
        applicant.user_id,
        reviewer.user_id,
        balance.balance_id,
        balance.total_remaining,
    )
    return leave


def reject(db: Session, leave_id: uuid.UUID, reviewer: User, comments: str | None = "") -> LeaveApplication:
    leave, applicant = _load_for_review(db, leave_id, reviewer)

    _transition(db, leave, "rejected", reviewer, comments)
    record(db, reviewer.user_id, "leave.rejected", "leave_application", leave.leave_id)

    logger.info("Leave %s for %s rejected by %s", leave.leave_id, applicant.user_id, reviewer.user_id)
    return leave


def list_for(db: Session, identity: User) -> list[tuple[LeaveApplication, User]]:
    stmt = visible_applications(identity)
    if has_capability(parse_role(identity.role), Capability.REVIEW_LEAVE):
        stmt = stmt.order_by(
            case((LeaveApplication.status == "pending", 0), else_=1),
            LeaveApplication.applied_at.desc(),
        )
    else:
        stmt = stmt.order_by(LeaveApplication.applied_at.desc())
    return [(leave, applicant) for leave, applicant in db.execute(stmt).all()]


def get(db: Session, leave_id: uuid.UUID, identity: User) -> tuple[LeaveApplication, User]:
    row = db.execute(
        select(LeaveApplication, User)
        .join(User, User.user_id == LeaveApplication.employee_id)
        .where(LeaveApplication.leave_id == leave_id)
    ).first()
    if row is None:
        raise NotFound("Leave application not found")

    visible = db.execute(
        visible_applications(identity).where(LeaveApplication.leave_id == leave_id)
    ).first()
    if visible is None:
        raise Forbidden("You cannot view this leave application")
    return row[0], row[1]
