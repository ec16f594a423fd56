"""Task service — workspace-scoped task CRUD with role-based visibility.

Learn: Every method takes the acting identity explicitly. The rules:

  list    workspace == identity.workspace, and assignee == identity.id
          unless the identity is an Admin
  create  workspace copied from the creator; assignee defaults to creator
  update  matched on (id, workspace) — any workspace member may update
  delete  matched on (id, workspace)

A task id from another workspace and a task id that doesn't exist raise
the same TaskNotFoundError, so nothing leaks across tenants.

Two settings tighten the defaults:
- restrict_assignee_to_workspace (on): assignees must share the creator's
  workspace; a foreign user looks exactly like a missing one.
- members_mutate_own_tasks_only (off): Members may only update/delete
  tasks assigned to them.

After each successful write the notifier is handed the task. It schedules
delivery in the background; nothing here waits on it.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskpulse.auth.dependencies import CurrentIdentity
from taskpulse.config import settings
from taskpulse.db.models import DEFAULT_TASK_STATUS, Task
from taskpulse.errors import AssigneeNotFoundError, TaskNotFoundError
from taskpulse.services.notifier import (
    TASK_CREATED,
    TASK_DELETED,
    TASK_UPDATED,
    TaskNotifier,
)
from taskpulse.stores.task_store import TaskStore
from taskpulse.stores.user_store import UserStore

logger = structlog.get_logger()

UPDATABLE_FIELDS = ("name", "description", "due_date", "priority", "status")
# Columns that can't hold NULL; an explicit null for these is ignored.
_NOT_NULL_FIELDS = ("name", "status")


def avatar_url(email: str) -> str:
    return f"{settings.avatar_base_url}?u={email}"


def parse_task_id(task_id: Any) -> uuid.UUID:
    """Malformed ids are just another kind of missing task."""
    if isinstance(task_id, uuid.UUID):
        return task_id
    try:
        return uuid.UUID(str(task_id))
    except ValueError:
        raise TaskNotFoundError()


class TaskService:
    """Business logic for task CRUD and tenancy enforcement."""

    def __init__(self, db: AsyncSession, notifier: TaskNotifier):
        self.db = db
        self.tasks = TaskStore(db)
        self.users = UserStore(db)
        self.notifier = notifier

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(self, identity: CurrentIdentity) -> list[Task]:
        assignee_id = None if identity.is_admin else identity.id
        tasks = await self.tasks.list(identity.workspace_name, assignee_id=assignee_id)
        logger.info(
            "tasks.listed",
            user_id=str(identity.id),
            role=identity.role,
            workspace=identity.workspace_name,
            count=len(tasks),
        )
        return tasks

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        identity: CurrentIdentity,
        name: str,
        description: Optional[str] = None,
        assignee_id: Optional[uuid.UUID] = None,
        due_date: Optional[datetime] = None,
        priority: Optional[str] = None,
        status: str = DEFAULT_TASK_STATUS,
    ) -> Task:
        """Create a task in the creator's workspace.

        Raises:
            AssigneeNotFoundError: the assignee doesn't exist (or, when
                restricted, belongs to another workspace)
        """
        assignee = await self.users.find_by_id(assignee_id or identity.id)
        if not assignee:
            raise AssigneeNotFoundError()
        if (
            settings.restrict_assignee_to_workspace
            and assignee.workspace_name != identity.workspace_name
        ):
            logger.warning(
                "tasks.cross_workspace_assignee_rejected",
                user_id=str(identity.id),
                workspace=identity.workspace_name,
            )
            raise AssigneeNotFoundError()

        task = Task(
            name=name,
            description=description,
            assignee_id=assignee.id,
            assignee_name=assignee.name,
            assignee_email=assignee.email,
            avatar=avatar_url(assignee.email),
            workspace_name=identity.workspace_name,
            due_date=due_date,
            priority=priority,
            status=status or DEFAULT_TASK_STATUS,
            created_by=identity.id,
        )
        task = await self.tasks.create(task)

        logger.info(
            "tasks.created",
            task_id=str(task.id),
            assignee_id=str(assignee.id),
            workspace=task.workspace_name,
        )
        self.notifier.notify(task, TASK_CREATED)
        return task

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        identity: CurrentIdentity,
        task_id: Any,
        fields: dict[str, Any],
    ) -> Task:
        """Apply a partial update. Raises TaskNotFoundError if nothing matched."""
        changes = {
            key: value
            for key, value in fields.items()
            if key in UPDATABLE_FIELDS
            and not (value is None and key in _NOT_NULL_FIELDS)
        }
        task = await self.tasks.update_scoped(
            parse_task_id(task_id),
            identity.workspace_name,
            changes,
            assignee_id=self._ownership_filter(identity),
        )
        if not task:
            raise TaskNotFoundError()

        logger.info("tasks.updated", task_id=str(task.id), fields=sorted(changes))
        self.notifier.notify(task, TASK_UPDATED)
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, identity: CurrentIdentity, task_id: Any) -> None:
        task = await self.tasks.delete_scoped(
            parse_task_id(task_id),
            identity.workspace_name,
            assignee_id=self._ownership_filter(identity),
        )
        if not task:
            raise TaskNotFoundError()

        logger.info("tasks.deleted", task_id=str(task.id), workspace=task.workspace_name)
        self.notifier.notify(task, TASK_DELETED)

    # ─── Helpers ─────────────────────────────────────────

    @staticmethod
    def _ownership_filter(identity: CurrentIdentity) -> Optional[uuid.UUID]:
        if settings.members_mutate_own_tasks_only and not identity.is_admin:
            return identity.id
        return None
