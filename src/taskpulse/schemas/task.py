"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PATCH to modify a task (only sent fields apply)
- TaskRead: what the API returns

priority and status are free-form strings: the UI offers
Low/Medium/High/Critical and Pending/In Progress/Completed/Overdue,
but the backend stores whatever it is given.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from taskpulse.db.models import DEFAULT_TASK_STATUS
from taskpulse.schemas.user import CamelModel


class TaskCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    assignee_id: Optional[uuid.UUID] = None
    due_date: Optional[datetime] = None
    priority: Optional[str] = Field(None, max_length=50)
    status: str = Field(default=DEFAULT_TASK_STATUS, min_length=1, max_length=50)


class TaskUpdate(CamelModel):
    """Partial update — only fields present in the request body are applied.

    Workspace, assignee and creator are not part of this schema, so a
    PATCH can't move a task to another tenant or rewrite its snapshot.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[str] = Field(None, max_length=50)
    status: Optional[str] = Field(None, min_length=1, max_length=50)


class TaskRead(CamelModel):
    id: uuid.UUID
    name: str
    description: Optional[str]
    assignee: uuid.UUID = Field(validation_alias="assignee_id")
    assignee_name: Optional[str]
    assignee_email: Optional[str]
    avatar: Optional[str]
    workspace_name: str
    due_date: Optional[datetime]
    priority: Optional[str]
    status: str
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
