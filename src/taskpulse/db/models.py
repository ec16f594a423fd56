"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic auto-generates migrations by comparing these
models to the actual DB.

Key concepts:
- UUID primary keys (generic Uuid type — native on PostgreSQL, CHAR(32) on SQLite)
- workspace_name is the tenant partition key on both tables
- Workspace uniqueness among Admins lives in a partial unique index, so two
  racing registrations can't both found "Acme" and "ACME"
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

ROLE_ADMIN = "Admin"
ROLE_MEMBER = "Member"

DEFAULT_ADMIN_JOB_TITLE = "Workspace Owner"
DEFAULT_MEMBER_JOB_TITLE = "Team Member"

DEFAULT_TASK_STATUS = "Pending"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class User(Base):
    """A registered person, bound to exactly one workspace.

    Learn: role and workspace_name are fixed at registration. The only
    mutable fields are name and job_title (profile update).
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_MEMBER)
    job_title: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_MEMBER_JOB_TITLE
    )
    workspace_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


# One founding Admin per workspace, compared case-insensitively.
Index(
    "uq_users_admin_workspace",
    func.lower(User.workspace_name),
    unique=True,
    postgresql_where=User.role == ROLE_ADMIN,
    sqlite_where=User.role == ROLE_ADMIN,
)


class Task(Base):
    """A unit of work inside a workspace.

    Learn: assignee_name / assignee_email / avatar are a snapshot taken at
    creation time. Renaming a user later does not rewrite old tasks.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_workspace_created", "workspace_name", "created_at"),
        Index("ix_tasks_workspace_assignee", "workspace_name", "assignee_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    assignee_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    assignee_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    assignee_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    workspace_name: Mapped[str] = mapped_column(String(100), nullable=False)
    due_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    priority: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_TASK_STATUS
    )
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
