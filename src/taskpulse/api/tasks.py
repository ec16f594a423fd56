"""Task API routes.

Learn: These routes translate HTTP to TaskService calls. The service
does all tenancy and role checks; routes never filter anything
themselves. Task ids are taken as plain strings so a malformed id gets
the same 404 as a missing one.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskpulse.auth.dependencies import CurrentIdentity, get_current_user
from taskpulse.db.engine import get_db
from taskpulse.schemas.task import TaskCreate, TaskRead, TaskUpdate
from taskpulse.services.notifier import TaskNotifier, get_notifier
from taskpulse.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


def _task_svc(
    db: AsyncSession = Depends(get_db),
    notifier: TaskNotifier = Depends(get_notifier),
) -> TaskService:
    return TaskService(db, notifier)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Admins get every task in the workspace; Members get their own."""
    return await svc.list_tasks(identity)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task, assigned to assigneeId or to the caller."""
    return await svc.create_task(
        identity,
        name=body.name,
        description=body.description,
        assignee_id=body.assignee_id,
        due_date=body.due_date,
        priority=body.priority,
        status=body.status,
    )


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task — only fields sent in the body change."""
    return await svc.update_task(identity, task_id, body.model_dump(exclude_unset=True))


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    await svc.delete_task(identity, task_id)
    return {"message": "Task deleted successfully"}
