"""TaskPulse CLI — run the server and work with tasks from the terminal.

Usage:
    taskpulse serve                                   # Run the API with uvicorn
    taskpulse register alice@x.com -n Alice -w Acme   # Found or join a workspace
    taskpulse login alice@x.com                       # Print a fresh token
    taskpulse tasks                                   # List visible tasks
    taskpulse add "Ship v1" --assignee <user-id>      # Create a task
    taskpulse users                                   # Workspace directory

Commands that need auth read the token from --token or TASKPULSE_TOKEN.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import sys
from typing import Optional

import click
import httpx

from taskpulse import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:5000"


def _api_url() -> str:
    return os.environ.get("TASKPULSE_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the TaskPulse backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _require_token(token: Optional[str]) -> str:
    tok = token or os.environ.get("TASKPULSE_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set TASKPULSE_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> dict | list:
    """Return the JSON body, or print the API's message and exit."""
    if r.is_success:
        return r.json()
    try:
        message = r.json().get("message", r.text)
    except ValueError:
        message = r.text
    click.secho(f"Error ({r.status_code}): {message}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _print_auth(data: dict):
    user = data["user"]
    click.secho(
        f"{user['name']} <{user['email']}> — {user['role']} of {user['workspaceName']}",
        fg="green",
    )
    click.echo(data["token"])


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="taskpulse")
def main():
    """TaskPulse — workspace task tracking."""


# ---------------------------------------------------------------------------
# taskpulse serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: TASKPULSE_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: TASKPULSE_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from taskpulse.config import settings

    uvicorn.run(
        "taskpulse.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# taskpulse register / login
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.option("--name", "-n", required=True, help="Display name")
@click.option("--workspace", "-w", required=True, help="Workspace to found or join")
@click.option("--role", type=click.Choice(["Admin", "Member"]), default=None,
              help="Admin founds a new workspace, Member joins one (default: decided by whether it exists)")
@click.option("--job-title", default=None, help="Job title")
@click.password_option()
def register(email: str, name: str, workspace: str, role: Optional[str],
             job_title: Optional[str], password: str):
    """Register EMAIL and print the session token."""
    _run(_register_impl(email, name, workspace, role, job_title, password))


async def _register_impl(email, name, workspace, role, job_title, password):
    body = {"email": email, "password": password, "name": name, "workspaceName": workspace}
    if role:
        body["role"] = role
    if job_title:
        body["jobTitle"] = job_title

    async with _client() as c:
        r = await c.post("/api/auth/register", json=body)
        _print_auth(_check(r))


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in as EMAIL and print a fresh session token."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/auth/login", json={"email": email, "password": password})
        _print_auth(_check(r))


# ---------------------------------------------------------------------------
# taskpulse tasks / add
# ---------------------------------------------------------------------------


@main.command()
@click.option("--token", help="Session token (or set TASKPULSE_TOKEN)")
def tasks(token: Optional[str]):
    """List the tasks visible to you (all of them for Admins)."""
    _run(_tasks_impl(_require_token(token)))


async def _tasks_impl(token: str):
    async with _client(token) as c:
        rows = _check(await c.get("/api/tasks"))

    if not rows:
        click.echo("No tasks found.")
        return

    click.secho(f"Tasks ({len(rows)}):", bold=True)
    _print_table(rows, [
        ("ID", "id", 36),
        ("Name", "name", 30),
        ("Assignee", "assigneeName", 16),
        ("Priority", "priority", 8),
        ("Status", "status", 12),
    ])


@main.command()
@click.argument("name")
@click.option("--description", "-d", default=None)
@click.option("--assignee", "-a", default=None, help="Assignee user id (default: you)")
@click.option("--due", default=None, help="Due date, ISO-8601 (e.g. 2026-11-01)")
@click.option("--priority", "-p", default=None, help="Low / Medium / High / Critical")
@click.option("--token", help="Session token (or set TASKPULSE_TOKEN)")
def add(name: str, description: Optional[str], assignee: Optional[str],
        due: Optional[str], priority: Optional[str], token: Optional[str]):
    """Create a task called NAME."""
    _run(_add_impl(_require_token(token), name, description, assignee, due, priority))


async def _add_impl(token, name, description, assignee, due, priority):
    body: dict = {"name": name}
    if description:
        body["description"] = description
    if assignee:
        body["assigneeId"] = assignee
    if due:
        body["dueDate"] = due
    if priority:
        body["priority"] = priority

    async with _client(token) as c:
        task = _check(await c.post("/api/tasks", json=body))
    click.secho(f"Created task {task['id']} for {task['assigneeName']}", fg="green")


# ---------------------------------------------------------------------------
# taskpulse users
# ---------------------------------------------------------------------------


@main.command()
@click.option("--token", help="Session token (or set TASKPULSE_TOKEN)")
def users(token: Optional[str]):
    """List everyone in your workspace."""
    _run(_users_impl(_require_token(token)))


async def _users_impl(token: str):
    async with _client(token) as c:
        rows = _check(await c.get("/api/users"))

    _print_table(rows, [
        ("ID", "id", 36),
        ("Name", "name", 20),
        ("Email", "email", 28),
        ("Role", "role", 6),
        ("Job title", "jobTitle", 20),
    ])


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
