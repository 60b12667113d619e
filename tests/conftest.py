"""Shared fixtures: a service bound to a throwaway SQLite file, and an
in-memory stand-in for the HTTP client used by the coordinator tests."""
import asyncio
from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from taskboard.client.coordinator import MutationCoordinator
from taskboard.client.errors import NotFoundOrUnauthorized
from taskboard.client.models import Task, TaskList, User
from taskboard.client.notify import Notifier
from taskboard.client.session import Session
from taskboard.database import create_tables, get_db, make_engine
from taskboard.identity import IdentityClaims, get_identity_verifier
from taskboard.main import app


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Service
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def fake_verifier(credential: str) -> IdentityClaims:
    if credential.startswith("bad"):
        raise ValueError("Token used too late")
    return IdentityClaims(
        subject=f"google-{credential}",
        email=f"{credential}@example.com",
        name=credential.title(),
    )


@pytest.fixture
def test_app(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'taskboard-test.db'}")
    create_tables(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_verifier] = lambda: fake_verifier
    yield app
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


@pytest.fixture
def login(client):
    """Sign in through the fake identity provider and return auth headers."""
    def _login(name: str = "alice") -> dict:
        response = client.post("/api/auth/google", json={"credential": name})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _login


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Client
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class RecordingNotifier(Notifier):
    def __init__(self):
        self.messages = []

    def success(self, message):
        self.messages.append(("success", message))

    def warning(self, message):
        self.messages.append(("warning", message))

    def error(self, message):
        self.messages.append(("error", message))

    def of(self, kind):
        return [message for level, message in self.messages if level == kind]


class FakeApi:
    """In-memory replacement for TaskboardApi.

    Records every call. `fail_with` makes the next call raise; `delays` holds
    per-call sleep times for update_task.
    """

    def __init__(self):
        self.token = None
        self.calls = []
        self.fail_with = None
        self.delays = []
        self.user = User(id="u1", email="alice@example.com", name="Alice")
        self.lists = {}
        self.tasks = {}
        self._clock = datetime(2024, 1, 1, 9, 0, 0)

    def _tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    def calls_to(self, name):
        return [call for call in self.calls if call[0] == name]

    def seed_list(self, name, list_id=None):
        task_list = TaskList(id=list_id or str(uuid4()), owner_id=self.user.id, name=name, created_at=self._tick())
        self.lists[task_list.id] = task_list
        return task_list

    def seed_task(self, title, list_id, **fields):
        task = Task(id=fields.pop("id", None) or str(uuid4()), owner_id=self.user.id, list_id=list_id,
                    title=title, created_at=self._tick(), **fields)
        self.tasks[task.id] = task
        return task

    async def login_google(self, credential):
        self._record("login_google", credential)
        return "token-123", self.user

    async def get_me(self):
        self._record("get_me")
        return self.user

    async def update_me(self, changes):
        self._record("update_me", changes)
        self.user = User.model_validate({**self.user.model_dump(), **changes})
        return self.user

    async def get_lists(self):
        self._record("get_lists")
        return list(self.lists.values())

    async def create_list(self, payload):
        self._record("create_list", payload)
        task_list = TaskList.model_validate(
            {"id": str(uuid4()), "owner_id": self.user.id, "created_at": self._tick(), **payload}
        )
        self.lists[task_list.id] = task_list
        return task_list

    async def update_list(self, list_id, changes):
        self._record("update_list", list_id, changes)
        if list_id not in self.lists:
            raise NotFoundOrUnauthorized("List not found or unauthorized")
        self.lists[list_id] = TaskList.model_validate({**self.lists[list_id].model_dump(), **changes})
        return self.lists[list_id]

    async def delete_list(self, list_id):
        self._record("delete_list", list_id)
        if list_id not in self.lists:
            raise NotFoundOrUnauthorized("List not found or unauthorized")
        del self.lists[list_id]
        self.tasks = {k: t for k, t in self.tasks.items() if t.list_id != list_id}

    async def get_tasks(self, list_id=None):
        self._record("get_tasks", list_id)
        return [t for t in self.tasks.values() if list_id is None or t.list_id == list_id]

    async def create_task(self, payload):
        self._record("create_task", payload)
        subtasks = [{"id": str(uuid4()), **s} for s in payload.get("subtasks", [])]
        task = Task.model_validate({
            "id": str(uuid4()), "owner_id": self.user.id, "created_at": self._tick(),
            **payload, "subtasks": subtasks,
        })
        self.tasks[task.id] = task
        return task

    async def update_task(self, task_id, changes):
        self._record("update_task", task_id, changes)
        if self.delays:
            await asyncio.sleep(self.delays.pop(0))
        if task_id not in self.tasks:
            raise NotFoundOrUnauthorized("Task not found")
        if "subtasks" in changes:
            changes = {**changes, "subtasks": [{**s, "id": s.get("id") or str(uuid4())} for s in changes["subtasks"]]}
        self.tasks[task_id] = Task.model_validate({**self.tasks[task_id].model_dump(), **changes})
        return self.tasks[task_id]

    async def delete_task(self, task_id):
        self._record("delete_task", task_id)
        if task_id not in self.tasks:
            raise NotFoundOrUnauthorized("Task not found")
        del self.tasks[task_id]


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def session(fake_api):
    return Session(api=fake_api)


@pytest.fixture
def coordinator(session, notifier):
    return MutationCoordinator(session, notifier=notifier)


@pytest.fixture
def signed_in(coordinator, fake_api):
    """A signed-in session with a default list already loaded."""
    fake_api.seed_list("My Tasks", list_id="inbox")
    asyncio.run(coordinator.login_with_google("alice"))
    fake_api.calls.clear()
    return coordinator
