"""
Tests for the persistence service: auth, owner scoping, lists, tasks, cascade.
"""
from datetime import timedelta

from taskboard.models import Task, TaskList, User
from taskboard.routers.auth import create_access_token


def _default_list_id(client, headers):
    lists = client.get("/api/lists", headers=headers).json()
    return lists[0]["id"]


def _create_task(client, headers, list_id, title="Write report", **fields):
    response = client.post("/api/tasks", json={"list_id": list_id, "title": title, **fields}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Auth
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_first_login_creates_default_list_once(client, login):
    """Logging in twice creates one user and one "My Tasks" list"""
    headers = login("alice")
    login("alice")

    lists = client.get("/api/lists", headers=headers).json()
    assert len(lists) == 1
    assert lists[0]["name"] == "My Tasks"
    assert lists[0]["icon"] == "Clock"
    assert lists[0]["default_view"] == "list"

    me = client.get("/api/auth/me", headers=headers).json()
    assert me["email"] == "alice@example.com"
    assert me["xp"] == 0
    assert me["level"] == 1
    assert me["badges"] == []


def test_invalid_identity_credential_is_rejected(client):
    response = client.post("/api/auth/google", json={"credential": "bad-token"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid token"


def test_missing_credential_is_401(client):
    assert client.get("/api/tasks").status_code == 401
    assert client.get("/api/lists").status_code == 401
    assert client.get("/api/auth/me").status_code == 401


def test_invalid_or_expired_credential_is_403(client, login):
    login("alice")
    assert client.get("/api/tasks", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 403

    me = client.get("/api/auth/me", headers=login("alice")).json()
    expired = create_access_token({"sub": me["id"]}, expires_delta=timedelta(minutes=-5))
    response = client.get("/api/tasks", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 403


def test_update_progress(client, login):
    headers = login("alice")
    response = client.patch("/api/auth/me", json={"xp": 40, "level": 2, "badges": ["first", "first"]}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert (body["xp"], body["level"], body["badges"]) == (40, 2, ["first"])

    assert client.patch("/api/auth/me", json={"xp": -1}, headers=headers).status_code == 422
    assert client.patch("/api/auth/me", json={"level": 0}, headers=headers).status_code == 422


def test_new_rows_carry_timezone_aware_timestamps():
    rows = (
        User(google_id="g-1", email="a@example.com", name="A"),
        TaskList(owner_id="u1", name="Inbox"),
        Task(owner_id="u1", list_id="l1", title="Write report"),
    )
    for row in rows:
        assert row.created_at.tzinfo is not None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Lists
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_create_and_partially_update_list(client, login):
    headers = login("alice")
    created = client.post("/api/lists", json={"name": "Work", "color": "#ff0000"}, headers=headers)
    assert created.status_code == 201
    list_id = created.json()["id"]
    assert created.json()["icon"] == "List"

    updated = client.patch(f"/api/lists/{list_id}", json={"name": "Office"}, headers=headers).json()
    assert updated["name"] == "Office"
    # Fields not sent are kept
    assert updated["color"] == "#ff0000"
    assert updated["icon"] == "List"


def test_list_name_cannot_be_empty(client, login):
    headers = login("alice")
    assert client.post("/api/lists", json={"name": "   "}, headers=headers).status_code == 422
    list_id = _default_list_id(client, headers)
    assert client.patch(f"/api/lists/{list_id}", json={"name": ""}, headers=headers).status_code == 422


def test_lists_are_owner_scoped(client, login):
    alice = login("alice")
    bob = login("bob")
    alice_list = _default_list_id(client, alice)

    assert client.patch(f"/api/lists/{alice_list}", json={"name": "Mine"}, headers=bob).status_code == 404
    assert client.delete(f"/api/lists/{alice_list}", headers=bob).status_code == 404
    assert len(client.get("/api/lists", headers=bob).json()) == 1


def test_delete_list_cascades_to_its_tasks(client, login):
    """Deleting a list removes every task under it and nothing else"""
    headers = login("alice")
    keep_list = _default_list_id(client, headers)
    doomed = client.post("/api/lists", json={"name": "Doomed"}, headers=headers).json()["id"]
    t1 = _create_task(client, headers, doomed, "T1")
    t2 = _create_task(client, headers, doomed, "T2")
    survivor = _create_task(client, headers, keep_list, "Survivor")

    response = client.delete(f"/api/lists/{doomed}", headers=headers)
    assert response.status_code == 200

    remaining = {t["id"] for t in client.get("/api/tasks", headers=headers).json()}
    assert t1["id"] not in remaining
    assert t2["id"] not in remaining
    assert survivor["id"] in remaining
    assert client.get(f"/api/tasks/{doomed}", headers=headers).json() == []
    assert client.patch(f"/api/tasks/{t1['id']}", json={"note": "x"}, headers=headers).status_code == 404


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Tasks
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_create_task_defaults(client, login):
    headers = login("alice")
    task = _create_task(client, headers, _default_list_id(client, headers))
    assert task["completed"] is False
    assert task["important"] is False
    assert task["priority"] == "low"
    assert task["status"] == "todo"
    assert task["recurrence"] == "none"
    assert task["time_spent"] == 0
    assert task["blocked_by"] == []
    assert task["subtasks"] == []
    assert task["note"] == ""


def test_create_task_validation(client, login):
    headers = login("alice")
    list_id = _default_list_id(client, headers)
    assert client.post("/api/tasks", json={"list_id": list_id, "title": " "}, headers=headers).status_code == 422
    assert client.post(
        "/api/tasks", json={"list_id": list_id, "title": "x", "priority": "urgent"}, headers=headers
    ).status_code == 422


def test_cannot_create_task_in_someone_elses_list(client, login):
    alice = login("alice")
    bob = login("bob")
    alice_list = _default_list_id(client, alice)
    response = client.post("/api/tasks", json={"list_id": alice_list, "title": "Sneaky"}, headers=bob)
    assert response.status_code == 404


def test_get_tasks_by_list(client, login):
    headers = login("alice")
    inbox = _default_list_id(client, headers)
    work = client.post("/api/lists", json={"name": "Work"}, headers=headers).json()["id"]
    _create_task(client, headers, inbox, "Home")
    _create_task(client, headers, work, "Office")

    assert [t["title"] for t in client.get(f"/api/tasks/{work}", headers=headers).json()] == ["Office"]
    assert len(client.get("/api/tasks", headers=headers).json()) == 2


def test_patch_task_is_partial(client, login):
    headers = login("alice")
    task = _create_task(client, headers, _default_list_id(client, headers), note="keep me", priority="medium")

    response = client.patch(
        f"/api/tasks/{task['id']}", json={"completed": True, "due_date": "2024-05-01"}, headers=headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["completed"] is True
    assert body["due_date"] == "2024-05-01"
    assert body["note"] == "keep me"
    assert body["priority"] == "medium"
    # status is a separate field and is not touched by completion
    assert body["status"] == "todo"

    cleared = client.patch(f"/api/tasks/{task['id']}", json={"due_date": None}, headers=headers).json()
    assert cleared["due_date"] is None


def test_task_cannot_block_itself(client, login):
    headers = login("alice")
    task = _create_task(client, headers, _default_list_id(client, headers))
    response = client.patch(f"/api/tasks/{task['id']}", json={"blocked_by": [task["id"]]}, headers=headers)
    assert response.status_code == 422


def test_subtasks_get_ids(client, login):
    headers = login("alice")
    task = _create_task(client, headers, _default_list_id(client, headers))
    body = client.patch(
        f"/api/tasks/{task['id']}",
        json={"subtasks": [{"title": "one"}, {"title": "two", "completed": True}]},
        headers=headers,
    ).json()
    assert [s["title"] for s in body["subtasks"]] == ["one", "two"]
    assert all(s["id"] for s in body["subtasks"])
    assert body["subtasks"][1]["completed"] is True


def test_deleting_a_blocker_leaves_stale_reference(client, login):
    headers = login("alice")
    list_id = _default_list_id(client, headers)
    blocker = _create_task(client, headers, list_id, "Blocker")
    blocked = _create_task(client, headers, list_id, "Blocked", blocked_by=[blocker["id"]])

    assert client.delete(f"/api/tasks/{blocker['id']}", headers=headers).status_code == 200
    tasks = {t["id"]: t for t in client.get("/api/tasks", headers=headers).json()}
    assert tasks[blocked["id"]]["blocked_by"] == [blocker["id"]]


def test_tasks_are_owner_scoped(client, login):
    alice = login("alice")
    bob = login("bob")
    task = _create_task(client, alice, _default_list_id(client, alice))

    assert client.get("/api/tasks", headers=bob).json() == []
    assert client.patch(f"/api/tasks/{task['id']}", json={"title": "mine"}, headers=bob).status_code == 404
    assert client.delete(f"/api/tasks/{task['id']}", headers=bob).status_code == 404
