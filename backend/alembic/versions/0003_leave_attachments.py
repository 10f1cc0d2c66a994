"""leave applications carry a list of attachment references

Revision ID: 0003_leave_attachments
Revises: 0002_legacy_admin_role
Create Date: 2026-10-19 10:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0003_leave_attachments"
down_revision = "0002_legacy_admin_role"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("leave_applications") as batch:
        batch.add_column(sa.Column("attachments", sa.JSON(), nullable=False, server_default="[]"))


def downgrade() -> None:
    with op.batch_alter_table("leave_applications") as batch:
        batch.drop_column("attachments")
