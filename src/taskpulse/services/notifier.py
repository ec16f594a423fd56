"""Task notifier — best-effort outbound webhook on task mutations.

Learn: Notifications are fire-and-forget. The payload is built right away
(so a deleted task can still be described), then delivery runs as its own
asyncio task. The request that caused the mutation never awaits it and
never sees its outcome:

  TaskService.create_task → commit → notifier.notify(task, "Created")
                                        └─ asyncio task: POST payload

No URL configured → log and skip. Delivery error or timeout → log and
swallow. A task mutation's success depends only on the database write.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog

from taskpulse.config import settings
from taskpulse.db.models import Task
from taskpulse.errors import NotifierError

logger = structlog.get_logger()

TASK_CREATED = "Created"
TASK_UPDATED = "Updated"
TASK_DELETED = "Deleted"

DEFAULT_DESCRIPTION = "Pulse Task"
DEFAULT_PRIORITY = "Medium"


def format_due_date(due_date: Optional[datetime]) -> str:
    """M/D/YYYY, or N/A when the task has no due date."""
    if not due_date:
        return "N/A"
    return f"{due_date.month}/{due_date.day}/{due_date.year}"


def build_payload(task: Task, event_type: str) -> dict[str, Any]:
    return {
        "task_id": str(task.id) if task.id else None,
        "taskName": task.name,
        "description": task.description or DEFAULT_DESCRIPTION,
        "assignee": task.assignee_name,
        "assigneeEmail": task.assignee_email,
        "workspace": task.workspace_name,
        "priority": task.priority or DEFAULT_PRIORITY,
        "status": task.status,
        "eventType": event_type,
        "due_date": format_due_date(task.due_date),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class TaskNotifier:
    """Delivers task events to a single configured webhook URL."""

    def __init__(
        self,
        webhook_url: str = "",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._transport = transport
        self._pending: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def notify(self, task: Task, event_type: str) -> Optional[asyncio.Task]:
        """Schedule delivery of a task event. Never raises, never blocks.

        Returns the scheduled asyncio task (None when disabled) so callers
        that care — tests, shutdown — can wait for it.
        """
        payload = build_payload(task, event_type)
        if not self.enabled:
            logger.info(
                "notifier.skipped",
                reason="no webhook url configured",
                task_id=payload["task_id"],
                event_type=event_type,
            )
            return None

        delivery = asyncio.create_task(self.deliver(payload))
        # Keep a strong reference until done, or the loop may drop it.
        self._pending.add(delivery)
        delivery.add_done_callback(self._pending.discard)
        return delivery

    async def deliver(self, payload: dict[str, Any]) -> bool:
        """POST one payload. Returns True on a 2xx, False on any failure."""
        if not self.enabled:
            logger.info("notifier.skipped", reason="no webhook url configured")
            return False

        log = logger.bind(task_id=payload.get("task_id"), event_type=payload.get("eventType"))
        try:
            await self._post(payload)
        except NotifierError as e:
            log.warning("notifier.delivery_failed", error=str(e))
            return False
        except Exception:
            log.exception("notifier.delivery_error")
            return False

        log.info("notifier.delivered")
        return True

    async def _post(self, payload: dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotifierError(
                f"webhook returned {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise NotifierError(f"{type(e).__name__}: {e}") from e

    async def drain(self) -> None:
        """Wait for every in-flight delivery (used at shutdown)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


_notifier: Optional[TaskNotifier] = None


def get_notifier() -> TaskNotifier:
    """FastAPI dependency — the process-wide notifier built from settings."""
    global _notifier
    if _notifier is None:
        _notifier = TaskNotifier(
            webhook_url=settings.notify_webhook_url,
            timeout=settings.notify_timeout_seconds,
        )
    return _notifier
