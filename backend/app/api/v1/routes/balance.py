"""Module: balance."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.routes.deps import get_current_user, get_db, parse_uuid, resolve_period
from app.core.errors import Forbidden, NotFound
from app.core.roles import Capability, has_capability, is_department_scoped, parse_role
from app.db.models.leave_balance import LeaveBalance
from app.db.models.user import User
from app.services import ledger

router = APIRouter()


def balance_to_dict(balance: LeaveBalance) -> dict:
    return {
        "balance_id": balance.balance_id,
        "employee_id": str(balance.employee_id),
        "year": balance.year,
        "month": balance.month,
        "total_monthly_allowance": balance.total_monthly_allowance,
        "total_taken": balance.total_taken,
        "total_remaining": balance.total_remaining,
        "per_category_taken": balance.per_category_taken,
        "last_updated": balance.last_updated,
    }


# Endpoint: caller's own balance; created at zero usage on first access.
@router.get("", summary="Current user's monthly leave balance")
def my_balance(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    year, month = resolve_period(year, month)
    balance = ledger.get_or_create_balance(db, user.user_id, year, month)
    db.commit()
    return balance_to_dict(balance)


@router.get("/{employee_id}", summary="Monthly leave balance of an employee (reviewers)")
def employee_balance(
    employee_id: str,
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    target_id = parse_uuid(employee_id, "employee_id")
    role = parse_role(user.role)
    if target_id != user.user_id and not has_capability(role, Capability.REVIEW_LEAVE):
        raise Forbidden("Only HOD or Principal can view other employees' balances")

    employee = db.get(User, target_id)
    if not employee:
        raise NotFound("Employee not found")
    if target_id != user.user_id and is_department_scoped(role) and employee.department != user.department:
        raise Forbidden("You can only view balances for your department")

    year, month = resolve_period(year, month)
    balance = ledger.get_or_create_balance(db, employee.user_id, year, month)
    db.commit()
    return balance_to_dict(balance)
