"""initial schema: users, departments, leave applications, balances, time slots, audit log

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="teacher"),
        sa.Column("department", sa.String(), nullable=False),
        sa.Column("employee_id", sa.String(), nullable=False, unique=True),
        sa.Column("join_date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "departments",
        sa.Column("department_id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("code", sa.String(), nullable=False, unique=True),
        sa.Column("hod_user_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "leave_applications",
        sa.Column("leave_id", sa.Uuid(), primary_key=True),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("leave_type", sa.String(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("days_count", sa.Integer(), nullable=False),
        sa.Column("applied_at", sa.DateTime(), nullable=False),
        sa.Column("reviewed_by", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("review_comments", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_applications_range"),
        sa.CheckConstraint("days_count >= 1", name="ck_leave_applications_days"),
        sa.CheckConstraint(
            "leave_type IN ('casual', 'sick', 'emergency', 'other')",
            name="ck_leave_applications_type",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_leave_applications_status",
        ),
    )
    op.create_index("ix_leave_applications_employee_id", "leave_applications", ["employee_id"])
    op.create_table(
        "leave_balances",
        sa.Column("balance_id", sa.String(), primary_key=True),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("total_monthly_allowance", sa.Integer(), nullable=False),
        sa.Column("total_taken", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_remaining", sa.Integer(), nullable=False),
        sa.Column("casual_taken", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sick_taken", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("emergency_taken", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("other_taken", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("employee_id", "year", "month", name="uq_leave_balances_period"),
        sa.CheckConstraint("total_remaining >= 0", name="ck_leave_balances_remaining"),
    )
    op.create_table(
        "time_slots",
        sa.Column("slot_id", sa.String(), primary_key=True),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False, unique=True),
        sa.Column("is_booked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("booked_by_user_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True),
        sa.Column("booked_by_name", sa.String(), nullable=True),
        sa.Column("booked_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "(is_booked AND booked_by_user_id IS NOT NULL) OR "
            "(NOT is_booked AND booked_by_user_id IS NULL)",
            name="ck_time_slots_owner",
        ),
    )
    op.create_table(
        "audit_log",
        sa.Column("audit_id", sa.Uuid(), primary_key=True),
        sa.Column("actor_user_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("target_type", sa.String(), nullable=False),
        sa.Column("target_id", sa.String(), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("time_slots")
    op.drop_table("leave_balances")
    op.drop_index("ix_leave_applications_employee_id", table_name="leave_applications")
    op.drop_table("leave_applications")
    op.drop_table("departments")
    op.drop_table("users")
