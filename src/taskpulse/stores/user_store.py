"""User store — persistence for user records.

Learn: The store is the only code that queries the users table. Workspace
lookups compare lower(workspace_name) = lower(:name) as a plain equality,
so a workspace called "a.*" or "[x]" is matched literally, never as a
pattern.
"""

import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskpulse.db.models import ROLE_ADMIN, User
from taskpulse.errors import EmailTakenError, WorkspaceTakenError


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    """Queries and writes for the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookups ─────────────────────────────────────────

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalars().first()

    async def find_by_workspace_name(self, workspace_name: str) -> Optional[User]:
        """Any user whose workspace matches case-insensitively.

        Admins sort first so the returned row carries the canonical casing.
        """
        result = await self.db.execute(
            select(User)
            .where(func.lower(User.workspace_name) == func.lower(workspace_name))
            .order_by((User.role == ROLE_ADMIN).desc(), User.created_at)
            .limit(1)
        )
        return result.scalars().first()

    async def find_workspace_admin(self, workspace_name: str) -> Optional[User]:
        """The Admin who founded the workspace, matched case-insensitively."""
        result = await self.db.execute(
            select(User).where(
                func.lower(User.workspace_name) == func.lower(workspace_name),
                User.role == ROLE_ADMIN,
            )
        )
        return result.scalars().first()

    async def list_by_workspace(self, workspace_name: str) -> list[User]:
        result = await self.db.execute(
            select(User)
            .where(User.workspace_name == workspace_name)
            .order_by(User.created_at)
        )
        return list(result.scalars().all())

    # ─── Writes ──────────────────────────────────────────

    async def create(self, user: User) -> User:
        """Insert a user and commit.

        Raises:
            EmailTakenError: the email is already registered
            WorkspaceTakenError: another Admin already owns this workspace
                (case-insensitively) — the unique index caught a race the
                caller's read check missed
        """
        user.email = normalize_email(user.email)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            if await self.find_by_email(user.email):
                raise EmailTakenError()
            raise WorkspaceTakenError()
        return user

    async def update_profile(
        self,
        user_id: uuid.UUID,
        name: Optional[str] = None,
        job_title: Optional[str] = None,
    ) -> Optional[User]:
        """Change name and/or job title. Email, role, workspace never change here."""
        user = await self.find_by_id(user_id)
        if not user:
            return None

        if name is not None:
            user.name = name
        if job_title is not None:
            user.job_title = job_title

        await self.db.commit()
        return user
