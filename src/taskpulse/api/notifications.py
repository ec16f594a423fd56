"""Notification check — send a dummy task event to the configured webhook.

Learn: Unlike real task events, this one is awaited so the caller can see
whether delivery worked. It still never fails the request: an unreachable
webhook just reports delivered=false.
"""

import uuid

from fastapi import APIRouter, Depends

from taskpulse.auth.dependencies import CurrentIdentity, get_current_user
from taskpulse.db.models import Task
from taskpulse.services.notifier import TASK_CREATED, TaskNotifier, build_payload, get_notifier

router = APIRouter(prefix="/notifications")


@router.post("/test")
async def send_test_notification(
    identity: CurrentIdentity = Depends(get_current_user),
    notifier: TaskNotifier = Depends(get_notifier),
):
    if not notifier.enabled:
        return {"message": "Notifications are disabled (no webhook URL configured)", "delivered": False}

    dummy = Task(
        id=uuid.uuid4(),
        name="Test Connection",
        assignee_name="Test User",
        assignee_email="test@example.com",
        workspace_name=identity.workspace_name,
        status="Pending",
    )
    delivered = await notifier.deliver(build_payload(dummy, TASK_CREATED))
    if delivered:
        return {"message": "Test notification sent", "delivered": True}
    return {"message": "Test notification failed, check server logs", "delivered": False}
