"""Auth API — registration and login.

Learn: Both routes return the same shape, {token, user}. The user view
never includes the password hash. Errors (duplicate email, workspace
clash, bad credentials) are raised by IdentityService and rendered by
the exception handler in main.py.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskpulse.db.engine import get_db
from taskpulse.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserRead
from taskpulse.services.identity_service import AuthResult, IdentityService

router = APIRouter(prefix="/auth")


def _identity_svc(db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(token=result.token, user=UserRead.model_validate(result.user))


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    svc: IdentityService = Depends(_identity_svc),
):
    """Create a user and bind them to a new or existing workspace."""
    result = await svc.register(
        email=body.email,
        password=body.password,
        name=body.name,
        workspace_name=body.workspace_name,
        job_title=body.job_title,
        requested_role=body.role,
    )
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    svc: IdentityService = Depends(_identity_svc),
):
    """Login with email and password → JWT."""
    result = await svc.login(body.email, body.password)
    return _auth_response(result)
