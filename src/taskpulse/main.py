"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (Redis pool, pending
notifications, database engine). Middleware, CORS, exception handlers
and routers are all registered here.

Every error leaves the API as {"message": "..."}:
- TaskPulseError subclasses carry their own status code
- request validation failures become 400
- anything unexpected is logged and becomes 500
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskpulse import __version__
from taskpulse.api import api_router
from taskpulse.config import settings
from taskpulse.errors import TaskPulseError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown.
    """
    logger.info(
        "taskpulse.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        notifications=bool(settings.notify_webhook_url),
    )

    from taskpulse.redis_client import close_redis, init_redis
    try:
        await init_redis()
        logger.info("taskpulse.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis is optional; only rate limiting depends on it
        logger.warning("taskpulse.redis_unavailable", error=str(e))

    yield

    logger.info("taskpulse.shutdown")

    # Let in-flight notifications finish
    from taskpulse.services.notifier import get_notifier
    await get_notifier().drain()

    await close_redis()

    from taskpulse.db.engine import engine
    await engine.dispose()


# ─── Exception handlers ──────────────────────────────────


async def _taskpulse_error(request: Request, exc: TaskPulseError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=headers,
    )


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("taskpulse.unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="TaskPulse",
        description="Multi-tenant task tracking — workspaces, roles, task assignment",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → RequestId → handler

    from taskpulse.middleware.rate_limit import RateLimitMiddleware
    from taskpulse.middleware.request_id import RequestIdMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TaskPulseError, _taskpulse_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskpulse.main:app)
app = create_app()
