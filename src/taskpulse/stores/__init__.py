"""Persistence layer: one store class per table, each wrapping an AsyncSession."""

from taskpulse.stores.task_store import TaskStore
from taskpulse.stores.user_store import UserStore, normalize_email

__all__ = ["TaskStore", "UserStore", "normalize_email"]
