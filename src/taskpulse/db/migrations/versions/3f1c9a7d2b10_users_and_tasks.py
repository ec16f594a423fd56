"""users and tasks

Creates the two tenant-partitioned tables. The partial unique index
uq_users_admin_workspace allows one Admin per lower(workspace_name),
which is what stops two concurrent registrations from both founding
"Acme" and "ACME".

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 09:12:44.512306
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("job_title", sa.String(100), nullable=False),
        sa.Column("workspace_name", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_workspace_name", "users", ["workspace_name"])
    op.create_index(
        "uq_users_admin_workspace",
        "users",
        [sa.text("lower(workspace_name)")],
        unique=True,
        postgresql_where=sa.text("role = 'Admin'"),
        sqlite_where=sa.text("role = 'Admin'"),
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("assignee_id", sa.Uuid(), nullable=False),
        sa.Column("assignee_name", sa.String(100), nullable=True),
        sa.Column("assignee_email", sa.String(255), nullable=True),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("workspace_name", sa.String(100), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("priority", sa.String(50), nullable=True),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_tasks_workspace_created", "tasks", ["workspace_name", "created_at"])
    op.create_index("ix_tasks_workspace_assignee", "tasks", ["workspace_name", "assignee_id"])


def downgrade() -> None:
    op.drop_index("ix_tasks_workspace_assignee", table_name="tasks")
    op.drop_index("ix_tasks_workspace_created", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("uq_users_admin_workspace", table_name="users")
    op.drop_index("ix_users_workspace_name", table_name="users")
    op.drop_table("users")
