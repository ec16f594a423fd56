"""Identity service — registration, login, profiles and the workspace directory.

Learn: Registration decides two things at once: the user's role and which
workspace they join. The requested role and whether the workspace already
exists (compared case-insensitively) pick the outcome:

  requested   workspace exists?   outcome
  ---------   -----------------   ----------------------------------------
  Member      no                  WorkspaceNotFoundError
  Admin       yes                 WorkspaceTakenError
  Member      yes                 Member of the existing workspace
  Admin       no                  Admin of a new workspace
  (none)      yes                 Member of the existing workspace
  (none)      no                  Admin of a new workspace

A Member joining "acme" is bound to the existing "Acme" — the casing the
founding Admin chose. The read check above can race with a concurrent
registration; the unique index on lower(workspace_name) for Admins is
what finally guarantees one founder per workspace. A registration with no
requested role that loses that race joins the winner's workspace as a
Member, exactly as if it had arrived a moment later.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskpulse.auth.dependencies import CurrentIdentity
from taskpulse.auth.jwt import create_access_token
from taskpulse.auth.password import burn_password_check, hash_password, verify_password
from taskpulse.db.models import (
    DEFAULT_ADMIN_JOB_TITLE,
    DEFAULT_MEMBER_JOB_TITLE,
    ROLE_ADMIN,
    ROLE_MEMBER,
    User,
)
from taskpulse.errors import (
    EmailTakenError,
    InvalidCredentialsError,
    UserNotFoundError,
    ValidationError,
    WorkspaceNotFoundError,
    WorkspaceTakenError,
)
from taskpulse.stores.user_store import UserStore, normalize_email

logger = structlog.get_logger()


@dataclass
class AuthResult:
    token: str
    user: User


def issue_token(user: User) -> str:
    return create_access_token(
        user_id=str(user.id),
        email=user.email,
        role=user.role,
        workspace_name=user.workspace_name,
        job_title=user.job_title,
    )


def resolve_membership(
    requested_role: Optional[str],
    submitted_workspace: str,
    existing: Optional[User],
) -> tuple[str, str]:
    """Apply the registration decision table. Returns (role, workspace_name)."""
    if requested_role == ROLE_MEMBER and existing is None:
        raise WorkspaceNotFoundError()
    if requested_role == ROLE_ADMIN and existing is not None:
        raise WorkspaceTakenError()

    if existing is not None:
        return ROLE_MEMBER, existing.workspace_name
    return ROLE_ADMIN, submitted_workspace


def _new_user(
    email: str,
    password_hash: str,
    name: str,
    role: str,
    workspace_name: str,
    job_title: Optional[str],
) -> User:
    default_title = DEFAULT_ADMIN_JOB_TITLE if role == ROLE_ADMIN else DEFAULT_MEMBER_JOB_TITLE
    return User(
        email=email,
        password_hash=password_hash,
        name=name,
        role=role,
        workspace_name=workspace_name,
        job_title=job_title or default_title,
    )


class IdentityService:
    """Business logic for accounts and workspace membership."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserStore(db)

    # ─── Register ────────────────────────────────────────

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        workspace_name: str,
        job_title: Optional[str] = None,
        requested_role: Optional[str] = None,
    ) -> AuthResult:
        email = normalize_email(email)
        workspace_name = workspace_name.strip()
        if not workspace_name:
            raise ValidationError("Workspace name is required")

        if await self.users.find_by_email(email):
            raise EmailTakenError()

        existing = await self.users.find_by_workspace_name(workspace_name)
        role, workspace = resolve_membership(requested_role, workspace_name, existing)
        password_hash = hash_password(password)

        try:
            user = await self.users.create(
                _new_user(email, password_hash, name, role, workspace, job_title)
            )
        except WorkspaceTakenError:
            # Lost a founding race. Without an explicit role that means
            # joining the winner's workspace instead.
            if requested_role is not None:
                raise
            owner = await self.users.find_workspace_admin(workspace_name)
            if owner is None:
                raise
            role, workspace = ROLE_MEMBER, owner.workspace_name
            user = await self.users.create(
                _new_user(email, password_hash, name, role, workspace, job_title)
            )
            existing = owner

        logger.info(
            "auth.registered",
            user_id=str(user.id),
            role=role,
            workspace=workspace,
            new_workspace=existing is None,
        )
        return AuthResult(token=issue_token(user), user=user)

    # ─── Login ───────────────────────────────────────────

    async def login(self, email: str, password: str) -> AuthResult:
        """Email/password → fresh token.

        Unknown email and wrong password raise the same error.
        """
        user = await self.users.find_by_email(email)
        if not user:
            burn_password_check(password)
            logger.info("auth.login_failed")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed")
            raise InvalidCredentialsError()

        logger.info("auth.login", user_id=str(user.id), workspace=user.workspace_name)
        return AuthResult(token=issue_token(user), user=user)

    # ─── Profile ─────────────────────────────────────────

    async def update_profile(
        self,
        identity: CurrentIdentity,
        name: Optional[str] = None,
        job_title: Optional[str] = None,
    ) -> User:
        user = await self.users.update_profile(identity.id, name=name, job_title=job_title)
        if not user:
            raise UserNotFoundError()
        return user

    # ─── Directory ───────────────────────────────────────

    async def list_workspace_users(self, identity: CurrentIdentity) -> list[User]:
        return await self.users.list_by_workspace(identity.workspace_name)
