"""Tenancy properties at the service/store level.

Learn: These tests skip HTTP and drive IdentityService / TaskService
directly with identities decoded from real tokens:
1. Tenant isolation over a randomized multi-workspace population
2. Workspace founding race: the read check is bypassed to simulate two
   registrations passing it at once; the unique index still admits one
3. Store-level workspace lookup semantics
"""

import random

import pytest

from taskpulse.auth.dependencies import identity_from_token
from taskpulse.db.models import ROLE_ADMIN, ROLE_MEMBER, User
from taskpulse.errors import EmailTakenError, WorkspaceTakenError
from taskpulse.services.identity_service import IdentityService
from taskpulse.services.notifier import TaskNotifier
from taskpulse.services.task_service import TaskService
from taskpulse.stores.user_store import UserStore

PASSWORD = "correct-horse-battery"


# ═══════════════════════════════════════════════════════════
# Tenant isolation
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_contains_exactly_visible_tasks(db_session):
    """list_tasks(I) ∋ T  ⇔  same workspace ∧ (I is Admin ∨ T.assignee == I)."""
    rng = random.Random(20261019)
    identities_svc = IdentityService(db_session)
    task_svc = TaskService(db_session, TaskNotifier())

    identities = []
    for ws in ("Acme", "Globex", "Initech"):
        for i in range(3):
            result = await identities_svc.register(
                email=f"u{i}@{ws.lower()}.com",
                password=PASSWORD,
                name=f"{ws} user {i}",
                workspace_name=ws if i == 0 else ws.upper(),
            )
            identities.append(identity_from_token(result.token))

    by_workspace: dict[str, list] = {}
    for ident in identities:
        by_workspace.setdefault(ident.workspace_name, []).append(ident)
    assert sorted(by_workspace) == ["Acme", "Globex", "Initech"]

    created = []
    for n in range(40):
        creator = rng.choice(identities)
        assignee = rng.choice(by_workspace[creator.workspace_name])
        task = await task_svc.create_task(
            creator, name=f"task {n}", assignee_id=assignee.id
        )
        created.append(task)

    for ident in identities:
        visible = {t.id for t in await task_svc.list_tasks(ident)}
        expected = {
            t.id
            for t in created
            if t.workspace_name == ident.workspace_name
            and (ident.is_admin or t.assignee_id == ident.id)
        }
        assert visible == expected, ident


@pytest.mark.asyncio
async def test_each_workspace_has_exactly_one_admin(db_session):
    svc = IdentityService(db_session)
    roles = []
    for i, ws in enumerate(["Acme", "ACME", "acme", "AcMe"]):
        result = await svc.register(
            email=f"p{i}@x.com", password=PASSWORD, name=f"P{i}", workspace_name=ws
        )
        roles.append((result.user.role, result.user.workspace_name))

    assert roles == [
        (ROLE_ADMIN, "Acme"),
        (ROLE_MEMBER, "Acme"),
        (ROLE_MEMBER, "Acme"),
        (ROLE_MEMBER, "Acme"),
    ]


# ═══════════════════════════════════════════════════════════
# Workspace founding race
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_racing_admin_registrations_yield_one_founder(db_session, monkeypatch):
    """Both registrations pass the existence check; only one may commit."""

    async def nobody_there(self, workspace_name):
        return None

    monkeypatch.setattr(UserStore, "find_by_workspace_name", nobody_there)
    svc = IdentityService(db_session)

    outcomes = []
    for email, ws in (("a@x.com", "Acme"), ("b@x.com", "ACME")):
        try:
            result = await svc.register(
                email=email,
                password=PASSWORD,
                name=email,
                workspace_name=ws,
                requested_role=ROLE_ADMIN,
            )
            outcomes.append(result.user.workspace_name)
        except WorkspaceTakenError:
            outcomes.append("taken")

    assert outcomes == ["Acme", "taken"]
    admins = [u for u in await UserStore(db_session).list_by_workspace("Acme") if u.is_admin]
    assert len(admins) == 1


@pytest.mark.asyncio
async def test_racing_roleless_registration_joins_as_member(db_session, monkeypatch):
    """Without a requested role, losing the founding race means joining."""

    async def nobody_there(self, workspace_name):
        return None

    monkeypatch.setattr(UserStore, "find_by_workspace_name", nobody_there)
    svc = IdentityService(db_session)

    founder = await svc.register(
        email="a@x.com", password=PASSWORD, name="A", workspace_name="Acme"
    )
    # The loser's rollback expires loaded rows, so read the founder now
    assert (founder.user.role, founder.user.workspace_name) == (ROLE_ADMIN, "Acme")

    joiner = await svc.register(
        email="b@x.com", password=PASSWORD, name="B", workspace_name="acme"
    )

    assert (joiner.user.role, joiner.user.workspace_name) == (ROLE_MEMBER, "Acme")
    assert joiner.user.job_title == "Team Member"
    assert identity_from_token(joiner.token).workspace_name == "Acme"

    members = await UserStore(db_session).list_by_workspace("Acme")
    assert sorted(u.email for u in members) == ["a@x.com", "b@x.com"]


@pytest.mark.asyncio
async def test_store_rejects_second_admin_for_workspace(db_session):
    store = UserStore(db_session)
    await store.create(User(
        email="a@x.com", password_hash="x", name="A", role=ROLE_ADMIN, workspace_name="Acme",
    ))

    with pytest.raises(WorkspaceTakenError):
        await store.create(User(
            email="b@x.com", password_hash="x", name="B", role=ROLE_ADMIN, workspace_name="aCME",
        ))

    # Members share the workspace freely
    member = await store.create(User(
        email="c@x.com", password_hash="x", name="C", role=ROLE_MEMBER, workspace_name="Acme",
    ))
    assert member.id is not None


@pytest.mark.asyncio
async def test_store_rejects_duplicate_email(db_session):
    store = UserStore(db_session)
    await store.create(User(
        email="a@x.com", password_hash="x", name="A", role=ROLE_ADMIN, workspace_name="One",
    ))
    with pytest.raises(EmailTakenError):
        await store.create(User(
            email=" A@X.com", password_hash="x", name="A2", role=ROLE_ADMIN, workspace_name="Two",
        ))


# ═══════════════════════════════════════════════════════════
# Workspace lookup
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_find_by_workspace_name_is_literal_and_case_insensitive(db_session):
    store = UserStore(db_session)
    await store.create(User(
        email="a@x.com", password_hash="x", name="A", role=ROLE_ADMIN, workspace_name="R&D (Team%_1)",
    ))

    found = await store.find_by_workspace_name("r&d (team%_1)")
    assert found is not None
    assert found.workspace_name == "R&D (Team%_1)"

    assert await store.find_by_workspace_name("R&D (Team%") is None
    assert await store.find_by_workspace_name("R&D (TeamX_1)") is None
    assert await store.find_by_workspace_name("R&D (Team%-1)") is None


@pytest.mark.asyncio
async def test_find_workspace_admin_ignores_members(db_session):
    store = UserStore(db_session)
    await store.create(User(
        email="m@x.com", password_hash="x", name="M", role=ROLE_MEMBER, workspace_name="Acme",
    ))
    assert await store.find_workspace_admin("acme") is None

    await store.create(User(
        email="a@x.com", password_hash="x", name="A", role=ROLE_ADMIN, workspace_name="Acme",
    ))
    admin = await store.find_workspace_admin("ACME")
    assert admin is not None
    assert admin.email == "a@x.com"
