"""Users API — workspace directory and profile updates."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskpulse.auth.dependencies import CurrentIdentity, get_current_user
from taskpulse.db.engine import get_db
from taskpulse.schemas.user import ProfileUpdate, UserRead, UserSummary
from taskpulse.services.identity_service import IdentityService

router = APIRouter(prefix="/users")


def _identity_svc(db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


@router.get("", response_model=list[UserSummary])
async def list_users(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: IdentityService = Depends(_identity_svc),
):
    """Everyone in the caller's workspace."""
    return await svc.list_workspace_users(identity)


@router.put("/profile", response_model=UserRead)
async def update_profile(
    body: ProfileUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: IdentityService = Depends(_identity_svc),
):
    """Update the caller's name and/or job title.

    The caller's token still carries the old job title until they log in
    again.
    """
    return await svc.update_profile(identity, name=body.name, job_title=body.job_title)
