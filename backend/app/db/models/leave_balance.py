"""Module: leave_balance."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


# One row per employee per calendar month; month is 1-12.
class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("employee_id", "year", "month", name="uq_leave_balances_period"),
        CheckConstraint("total_remaining >= 0", name="ck_leave_balances_remaining"),
    )

    # "<employee_id>_<year>_<month>"
    balance_id: Mapped[str] = mapped_column(String, primary_key=True)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    total_monthly_allowance: Mapped[int] = mapped_column(Integer, nullable=False)
    total_taken: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_remaining: Mapped[int] = mapped_column(Integer, nullable=False)

    casual_taken: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sick_taken: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    emergency_taken: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    other_taken: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_updated: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    @property
    def per_category_taken(self) -> dict[str, int]:
        return {
            "casual": self.casual_taken,
            "sick": self.sick_taken,
            "emergency": self.emergency_taken,
            "other": self.other_taken,
        }
