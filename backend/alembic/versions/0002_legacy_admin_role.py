"""upgrade simplified-variant "admin" reviewers to "hod"

Revision ID: 0002_legacy_admin_role
Revises: 0001_initial_schema
Create Date: 2026-10-18 09:30:00

"""
from alembic import op

revision = "0002_legacy_admin_role"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("UPDATE users SET role = 'hod' WHERE LOWER(role) = 'admin'")
    op.execute("UPDATE users SET role = LOWER(role) WHERE role <> LOWER(role)")


def downgrade() -> None:
    # Irreversible: original "admin" rows are indistinguishable from real HODs.
    pass
