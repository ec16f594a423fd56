"""Task store — persistence for task records.

Learn: Every read and write here takes the workspace name as an argument
and filters on it. There is deliberately no "get task by id" without a
workspace: a task id alone must never be enough to reach a row.
"""

import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskpulse.db.models import Task


class TaskStore:
    """Workspace-scoped queries and writes for the tasks table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(
        self,
        workspace_name: str,
        assignee_id: Optional[uuid.UUID] = None,
    ) -> list[Task]:
        """Tasks in a workspace, newest first. Optionally only one assignee's."""
        query = (
            select(Task)
            .where(Task.workspace_name == workspace_name)
            .order_by(Task.created_at.desc())
        )
        if assignee_id is not None:
            query = query.where(Task.assignee_id == assignee_id)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_scoped(
        self,
        task_id: uuid.UUID,
        workspace_name: str,
        assignee_id: Optional[uuid.UUID] = None,
    ) -> Optional[Task]:
        query = select(Task).where(
            Task.id == task_id, Task.workspace_name == workspace_name
        )
        if assignee_id is not None:
            query = query.where(Task.assignee_id == assignee_id)

        result = await self.db.execute(query)
        return result.scalars().first()

    async def create(self, task: Task) -> Task:
        self.db.add(task)
        await self.db.commit()
        return task

    async def update_scoped(
        self,
        task_id: uuid.UUID,
        workspace_name: str,
        fields: dict[str, Any],
        assignee_id: Optional[uuid.UUID] = None,
    ) -> Optional[Task]:
        """Apply fields to the matching task. None if nothing matched."""
        task = await self.get_scoped(task_id, workspace_name, assignee_id)
        if not task:
            return None

        for key, value in fields.items():
            setattr(task, key, value)

        await self.db.commit()
        return task

    async def delete_scoped(
        self,
        task_id: uuid.UUID,
        workspace_name: str,
        assignee_id: Optional[uuid.UUID] = None,
    ) -> Optional[Task]:
        """Delete the matching task and return it. None if nothing matched."""
        task = await self.get_scoped(task_id, workspace_name, assignee_id)
        if not task:
            return None

        await self.db.delete(task)
        await self.db.commit()
        return task
