"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own SQLite (aiosqlite) in-memory engine with the
   schema created from the models — including the partial unique index
   on Admin workspaces, so the same constraints apply as in Postgres.
2. The app's get_db dependency is overridden to hand out sessions bound
   to that engine, one per request, exactly like production.
3. The notifier dependency is overridden with a disabled TaskNotifier.
   Tests that want deliveries override the `notifier` fixture.

Auth is NOT mocked: tests register and log in through the API and send
real bearer tokens, so the access guard runs on every protected call.
"""

import os

# Must be set before taskpulse.config is imported.
os.environ["TASKPULSE_BCRYPT_ROUNDS"] = "4"
os.environ["TASKPULSE_NOTIFY_WEBHOOK_URL"] = ""
os.environ["TASKPULSE_ENVIRONMENT"] = "development"

import uuid  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from taskpulse.db.engine import get_db  # noqa: E402
from taskpulse.db.models import Base  # noqa: E402
from taskpulse.main import app  # noqa: E402
from taskpulse.services.notifier import TaskNotifier, get_notifier  # noqa: E402

PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture()
async def engine():
    """Per-test in-memory database with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A single session for service- and store-level tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def notifier():
    """Disabled notifier — no webhook URL, nothing leaves the process."""
    return TaskNotifier(webhook_url="")


@pytest_asyncio.fixture()
async def client(session_factory, notifier):
    """HTTP client against the real app with DB and notifier overridden."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await notifier.drain()
    app.dependency_overrides.clear()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def register(client):
    """Register through the API. Returns the parsed {token, user} body.

    Pass expect=<status> to assert a failure instead.
    """

    async def _register(
        email: str | None = None,
        workspace: str = "Acme",
        role: str | None = None,
        name: str = "Test User",
        job_title: str | None = None,
        password: str = PASSWORD,
        expect: int = 201,
    ):
        body = {
            "email": email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "workspaceName": workspace,
        }
        if role:
            body["role"] = role
        if job_title:
            body["jobTitle"] = job_title
        r = await client.post("/api/auth/register", json=body)
        assert r.status_code == expect, r.text
        return r.json()

    return _register
