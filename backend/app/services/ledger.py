"""Module: ledger.

Monthly leave balance bookkeeping. One record per employee per calendar month
holds the allowance and the days taken so far, pooled across categories, with
per-category counters kept alongside for reporting.

Usage is applied with a single conditional UPDATE so that the "enough days
left?" check and the decrement happen atomically on the stored row; two
approvals racing for the last days of a month cannot both succeed.
"""

import logging
import uuid
from datetime import date

from sqlalchemy import insert, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InsufficientBalance, ValidationError
from app.db.base import utcnow
from app.db.models.leave_application import LEAVE_TYPES
from app.db.models.leave_balance import LeaveBalance

logger = logging.getLogger(__name__)

CATEGORY_COLUMNS = {
    "casual": "casual_taken",
    "sick": "sick_taken",
    "emergency": "emergency_taken",
    "other": "other_taken",
}

_CONFLICT_SAFE_INSERTS = {"postgresql": postgresql_insert, "sqlite": sqlite_insert}


def balance_key(employee_id: uuid.UUID, year: int, month: int) -> str:
    return f"{employee_id}_{year}_{month}"


def _insert_if_missing(db: Session, values: dict) -> bool:
    """Insert a balance row unless one already exists for its key; True when this call created it."""
    dialect_insert = _CONFLICT_SAFE_INSERTS.get(db.get_bind().dialect.name)
    if dialect_insert is not None:
        result = db.execute(dialect_insert(LeaveBalance).values(**values).on_conflict_do_nothing())
        return result.rowcount > 0

    try:
        with db.begin_nested():
            db.execute(insert(LeaveBalance).values(**values))
    except IntegrityError:
        return False
    return True


def get_or_create_balance(db: Session, employee_id: uuid.UUID, year: int, month: int) -> LeaveBalance:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")

    key = balance_key(employee_id, year, month)
    balance = db.get(LeaveBalance, key)
    if balance is not None:
        return balance

    # Another request may create the same month between the lookup and the insert.
    allowance = settings.monthly_leave_allowance
    created = _insert_if_missing(
        db,
        {
            "balance_id": key,
            "employee_id": employee_id,
            "year": year,
            "month": month,
            "total_monthly_allowance": allowance,
            "total_taken": 0,
            "total_remaining": allowance,
            "casual_taken": 0,
            "sick_taken": 0,
            "emergency_taken": 0,
            "other_taken": 0,
            "last_updated": utcnow(),
        },
    )
    balance = db.get(LeaveBalance, key)
    if created:
        logger.info("Created leave balance %s with allowance=%s", key, allowance)
    else:
        logger.info("Leave balance %s was created concurrently; using the stored record", key)
    return balance


def balance_for(db: Session, employee_id: uuid.UUID, on_date: date) -> LeaveBalance:
    return get_or_create_balance(db, employee_id, on_date.year, on_date.month)


def ensure_available(balance: LeaveBalance, days: int, leave_type: str | None = None) -> None:
    if days > balance.total_remaining:
        label = f"{leave_type} " if leave_type else ""
        raise InsufficientBalance(
            f"Insufficient {label}leave balance: requested {days} day(s), "
            f"{balance.total_remaining} remaining for {balance.year}-{balance.month:02d}"
        )


def apply_usage(db: Session, balance: LeaveBalance, leave_type: str, days: int) -> LeaveBalance:
    if leave_type not in LEAVE_TYPES:
        raise ValidationError(f"Unknown leave type '{leave_type}'")
    if days < 1:
        raise ValidationError("days must be at least 1")

    category = CATEGORY_COLUMNS[leave_type]
    result = db.execute(
        update(LeaveBalance)
        .where(
            LeaveBalance.balance_id == balance.balance_id,
            LeaveBalance.total_remaining >= days,
        )
        .values(
            {
                "total_taken": LeaveBalance.total_taken + days,
                "total_remaining": LeaveBalance.total_remaining - days,
                category: getattr(LeaveBalance, category) + days,
                "last_updated": utcnow(),
            }
        )
        .execution_options(synchronize_session=False)
    )
    db.refresh(balance)

    if result.rowcount == 0:
        ensure_available(balance, days, leave_type)
        raise InsufficientBalance()

    logger.info(
        "Applied %s day(s) of %s leave to %s (taken=%s remaining=%s)",
        days,
        leave_type,
        balance.balance_id,
        balance.total_taken,
        balance.total_remaining,
    )
    return balance
