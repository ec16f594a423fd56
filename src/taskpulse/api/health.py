"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and dependencies are reachable. Postgres is required; Redis only
backs rate limiting, and notifications are optional, so those two
are reported but never make the service "degraded".
"""

from fastapi import APIRouter
from sqlalchemy import text

from taskpulse import __version__
from taskpulse.config import settings
from taskpulse.db import engine as db_engine

router = APIRouter()


@router.get("/health")
async def health_check():
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        async with db_engine.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    try:
        from taskpulse.redis_client import get_redis

        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"unavailable: {e}"

    checks["notifications"] = "enabled" if settings.notify_webhook_url else "disabled"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks}
