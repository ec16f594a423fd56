"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. Health and auth routers are open (no auth
required); everything else needs a valid bearer token. Handlers that
need the identity itself declare Depends(get_current_user) again —
FastAPI caches it per request, so the token is verified once.
"""

from fastapi import APIRouter, Depends

from taskpulse.api.auth import router as auth_router
from taskpulse.api.health import router as health_router
from taskpulse.api.notifications import router as notifications_router
from taskpulse.api.tasks import router as tasks_router
from taskpulse.api.users import router as users_router
from taskpulse.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes, no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes require a valid bearer token
api_router.include_router(users_router, tags=["users"], dependencies=_auth)
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
api_router.include_router(notifications_router, tags=["notifications"], dependencies=_auth)
