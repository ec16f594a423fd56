"""CLI tests — commands run through Click's CliRunner.

Learn: The CLI only speaks HTTP. `_client` is patched to return an
httpx.AsyncClient over a MockTransport, so each test scripts the API
responses and inspects what the command sent.
"""

import json
import uuid

import httpx
import pytest
from click.testing import CliRunner

from taskpulse.cli import main as cli

TOKEN = "tok-123"
USER_ID = str(uuid.uuid4())

ALICE = {
    "id": USER_ID,
    "name": "Alice",
    "email": "alice@x.com",
    "role": "Admin",
    "workspaceName": "Acme",
    "jobTitle": "Workspace Owner",
}


class FakeApi:
    """Scripted API: maps (method, path) to (status, body) and records requests."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes[(request.method, request.url.path)]
        return httpx.Response(status, json=body)

    def sent_json(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.delenv("TASKPULSE_TOKEN", raising=False)
    return CliRunner()


@pytest.fixture
def use_api(monkeypatch):
    def _install(routes: dict) -> FakeApi:
        api = FakeApi(routes)

        def fake_client(token=None):
            headers = {"Authorization": f"Bearer {token}"} if token else {}
            return httpx.AsyncClient(
                base_url="http://taskpulse.test",
                headers=headers,
                transport=httpx.MockTransport(api),
            )

        monkeypatch.setattr(cli, "_client", fake_client)
        return api

    return _install


# ═══════════════════════════════════════════════════════════
# Auth commands
# ═══════════════════════════════════════════════════════════


def test_login_prints_token(runner, use_api):
    api = use_api({("POST", "/api/auth/login"): (200, {"token": TOKEN, "user": ALICE})})
    result = runner.invoke(cli.main, ["login", "alice@x.com", "--password", "secret-pass"])

    assert result.exit_code == 0, result.output
    assert TOKEN in result.output
    assert "Admin of Acme" in result.output
    assert api.sent_json() == {"email": "alice@x.com", "password": "secret-pass"}


def test_login_failure_exits_with_message(runner, use_api):
    use_api({("POST", "/api/auth/login"): (401, {"message": "Invalid credentials"})})
    result = runner.invoke(cli.main, ["login", "alice@x.com", "--password", "nope"])

    assert result.exit_code == 1
    assert "Error (401): Invalid credentials" in result.output


def test_register_sends_camel_case_body(runner, use_api):
    api = use_api({("POST", "/api/auth/register"): (201, {"token": TOKEN, "user": ALICE})})
    result = runner.invoke(
        cli.main,
        ["register", "alice@x.com", "-n", "Alice", "-w", "Acme", "--role", "Admin",
         "--password", "secret-pass"],
    )

    assert result.exit_code == 0, result.output
    assert api.sent_json() == {
        "email": "alice@x.com",
        "password": "secret-pass",
        "name": "Alice",
        "workspaceName": "Acme",
        "role": "Admin",
    }


# ═══════════════════════════════════════════════════════════
# Task + user commands
# ═══════════════════════════════════════════════════════════


def test_tasks_requires_token(runner):
    result = runner.invoke(cli.main, ["tasks"])
    assert result.exit_code == 1
    assert "--token required" in result.output


def test_tasks_lists_rows(runner, use_api):
    task_id = str(uuid.uuid4())
    api = use_api({
        ("GET", "/api/tasks"): (200, [{
            "id": task_id,
            "name": "Ship v1",
            "assigneeName": "Bob",
            "priority": "High",
            "status": "Pending",
        }]),
    })
    result = runner.invoke(cli.main, ["tasks", "--token", TOKEN])

    assert result.exit_code == 0, result.output
    assert "Tasks (1):" in result.output
    assert task_id in result.output
    assert "Ship v1" in result.output
    assert api.requests[0].headers["Authorization"] == f"Bearer {TOKEN}"


def test_tasks_empty(runner, use_api, monkeypatch):
    monkeypatch.setenv("TASKPULSE_TOKEN", TOKEN)
    use_api({("GET", "/api/tasks"): (200, [])})
    result = runner.invoke(cli.main, ["tasks"])
    assert result.exit_code == 0, result.output
    assert "No tasks found." in result.output


def test_add_task(runner, use_api):
    assignee = str(uuid.uuid4())
    api = use_api({
        ("POST", "/api/tasks"): (201, {"id": "t-1", "name": "Ship v1", "assigneeName": "Bob"}),
    })
    result = runner.invoke(
        cli.main,
        ["add", "Ship v1", "-a", assignee, "-p", "High", "--due", "2026-11-01", "--token", TOKEN],
    )

    assert result.exit_code == 0, result.output
    assert "Created task t-1 for Bob" in result.output
    assert api.sent_json() == {
        "name": "Ship v1",
        "assigneeId": assignee,
        "priority": "High",
        "dueDate": "2026-11-01",
    }


def test_add_task_unknown_assignee(runner, use_api):
    use_api({("POST", "/api/tasks"): (404, {"message": "Assignee not found"})})
    result = runner.invoke(cli.main, ["add", "Ship v1", "-a", "nobody", "--token", TOKEN])
    assert result.exit_code == 1
    assert "Assignee not found" in result.output


def test_users_directory(runner, use_api):
    use_api({("GET", "/api/users"): (200, [
        {"id": USER_ID, "name": "Alice", "email": "alice@x.com", "role": "Admin",
         "jobTitle": "Workspace Owner"},
    ])})
    result = runner.invoke(cli.main, ["users", "--token", TOKEN])
    assert result.exit_code == 0, result.output
    assert "alice@x.com" in result.output
    assert "Workspace Owner" in result.output
