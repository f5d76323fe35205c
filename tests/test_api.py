from uuid import uuid4

import pytest

from taskflow.services.push import get_push_sender


@pytest.fixture
def project(client):
    response = client.post("/api/projects", json={"name": "P1", "description": "first"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def board(client, project):
    response = client.post("/api/boards", json={"name": "Sprint 1", "projectId": project["id"]})
    assert response.status_code == 201
    return response.json()


def _column_id(board, name):
    return next(column["id"] for column in board["columns"] if column["name"] == name)


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_and_list_projects(client, project):
    response = client.get("/api/projects")

    assert response.status_code == 200
    assert [(p["id"], p["name"], p["board_count"]) for p in response.json()] == [(project["id"], "P1", 0)]


def test_create_project_requires_name(client):
    response = client.post("/api/projects", json={"description": "no name"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request"
    assert body["details"]


def test_update_project(client, project):
    response = client.patch(f"/api/projects/{project['id']}", json={"name": "Renamed"})

    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["description"] == "first"


def test_update_project_clears_description(client, project):
    response = client.patch(f"/api/projects/{project['id']}", json={"description": None})

    assert response.status_code == 200
    assert response.json()["name"] == "P1"
    assert response.json()["description"] is None


def test_create_board_scenario(client, project, board):
    assert [c["name"] for c in board["columns"]] == ["To Do", "In Progress", "Done"]
    assert board["project_id"] == project["id"]

    boards = client.get(f"/api/projects/{project['id']}/boards").json()
    assert [b["id"] for b in boards] == [board["id"]]
    assert client.get("/api/projects").json()[0]["board_count"] == 1

    response = client.delete(f"/api/boards/{board['id']}")
    assert response.status_code == 200
    assert response.json()["tasksDeleted"] == 0
    assert response.json()["columnsDeleted"] == 3
    assert client.get(f"/api/projects/{project['id']}/boards").json() == []
    assert client.get("/api/projects").json()[0]["board_count"] == 0


def test_create_board_accepts_snake_case(client, project):
    response = client.post("/api/boards", json={"name": "Sprint 2", "project_id": project["id"]})
    assert response.status_code == 201


def test_create_board_for_missing_project(client):
    response = client.post("/api/boards", json={"name": "Orphan", "projectId": str(uuid4())})

    assert response.status_code == 404
    assert response.json() == {"message": "Project not found"}


def test_create_board_with_malformed_project_id(client):
    response = client.post("/api/boards", json={"name": "Sprint", "projectId": "abc"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid project ID"


def test_create_board_name_too_long(client, project):
    response = client.post("/api/boards", json={"name": "x" * 51, "projectId": project["id"]})
    assert response.status_code == 400


def test_list_boards_requires_project_id(client):
    response = client.get("/api/boards")

    assert response.status_code == 400
    assert response.json()["message"] == "A projectId is required to fetch boards."


def test_list_boards_by_query(client, project, board):
    response = client.get("/api/boards", params={"projectId": project["id"]})
    assert [b["id"] for b in response.json()] == [board["id"]]


def test_rename_board_and_column(client, board):
    response = client.patch(f"/api/boards/{board['id']}", json={"name": "Sprint 1b"})
    assert response.json()["name"] == "Sprint 1b"

    column_id = _column_id(board, "Done")
    response = client.patch(f"/api/columns/{column_id}", json={"name": "Shipped"})
    assert response.status_code == 200
    assert response.json()["name"] == "Shipped"


def test_add_column(client, board):
    response = client.post(f"/api/boards/{board['id']}/columns", json={"name": "Review"})

    assert response.status_code == 201
    assert response.json()["position"] == 3
    columns = client.get(f"/api/boards/{board['id']}").json()["columns"]
    assert [c["name"] for c in columns] == ["To Do", "In Progress", "Done", "Review"]


def test_task_crud(client, project, board):
    response = client.post(
        "/api/tasks",
        json={
            "title": "Write docs",
            "projectId": project["id"],
            "boardId": board["id"],
            "priority": "High",
            "dueDate": "2026-10-20T00:00:00",
        },
    )
    assert response.status_code == 201
    task = response.json()
    assert task["column_id"] == _column_id(board, "To Do")
    assert task["status"] == "to-do"
    assert task["priority"] == "high"
    assert task["time_spent"] == 0

    response = client.patch(f"/api/tasks/{task['id']}", json={"columnId": _column_id(board, "Done")})
    assert response.status_code == 200
    assert response.json()["status"] == "done"

    response = client.patch(f"/api/tasks/{task['id']}", json={"status": "In Progress"})
    assert response.json()["column_id"] == _column_id(board, "In Progress")

    listed = client.get("/api/tasks", params={"boardId": board["id"]}).json()
    assert [t["id"] for t in listed] == [task["id"]]

    response = client.delete(f"/api/tasks/{task['id']}")
    assert response.json() == {"message": "Deleted Task"}
    assert client.get(f"/api/tasks/{task['id']}").status_code == 404


def test_task_invalid_status(client, project, board):
    response = client.post(
        "/api/tasks",
        json={"title": "x", "projectId": project["id"], "boardId": board["id"], "status": "blocked"},
    )
    assert response.status_code == 400


def test_task_timer(client, project, board):
    task = client.post(
        "/api/tasks", json={"title": "Timed", "projectId": project["id"], "boardId": board["id"]}
    ).json()

    response = client.post(f"/api/tasks/{task['id']}/timer/start")
    assert response.json()["is_running"] is True

    response = client.post(f"/api/tasks/{task['id']}/timer/stop", json={"timeElapsed": 42})
    assert response.json()["is_running"] is False
    assert response.json()["time_spent"] == 42

    response = client.post(f"/api/tasks/{task['id']}/timer/stop", json={"timeElapsed": -5})
    assert response.status_code == 400


def test_delete_project_cascades(client, project, board):
    task = client.post(
        "/api/tasks", json={"title": "a", "projectId": project["id"], "boardId": board["id"]}
    ).json()

    response = client.delete(f"/api/projects/{project['id']}")

    assert response.status_code == 200
    body = response.json()
    assert (body["tasksDeleted"], body["columnsDeleted"], body["boardsDeleted"]) == (1, 3, 1)
    assert client.get(f"/api/projects/{project['id']}").status_code == 404
    assert client.get(f"/api/boards/{board['id']}").status_code == 404
    assert client.get(f"/api/tasks/{task['id']}").status_code == 404
    assert client.get(f"/api/projects/{project['id']}/boards").status_code == 404


def test_delete_unknown_board(client):
    assert client.delete(f"/api/boards/{uuid4()}").status_code == 404
    assert client.delete("/api/boards/not-an-id").status_code == 400


def test_auth_and_ownership(client):
    response = client.post("/api/auth/signup", json={"email": "ada@example.com", "password": "secret"})
    assert response.status_code == 201
    token = response.json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}
    user_id = response.json()["user"]["id"]

    assert client.get("/api/auth/me", headers=headers).json()["email"] == "ada@example.com"
    assert client.post("/api/auth/signin", json={"email": "ada@example.com", "password": "wrong"}).status_code == 401

    project = client.post("/api/projects", json={"name": "Mine"}, headers=headers).json()
    assert project["owner_id"] == user_id
    members = client.get(f"/api/projects/{project['id']}/members").json()
    assert [m["id"] for m in members] == [user_id]

    response = client.delete(f"/api/projects/{project['id']}/members/{user_id}")
    assert response.status_code == 400


def test_add_and_remove_member(client, project):
    user = client.post("/api/auth/signup", json={"email": "bob@example.com", "password": "pw"}).json()["user"]

    response = client.post(f"/api/projects/{project['id']}/members", json={"email": "bob@example.com"})
    assert [m["id"] for m in response.json()] == [user["id"]]

    response = client.delete(f"/api/projects/{project['id']}/members/{user['id']}")
    assert response.json() == []

    response = client.post(f"/api/projects/{project['id']}/members", json={"email": "ghost@example.com"})
    assert response.status_code == 404


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}


def test_subscribe_sends_welcome(app, client):
    sent = []
    app.dependency_overrides[get_push_sender] = lambda: lambda subscription, payload: sent.append(payload) or True

    body = {"endpoint": "https://push.example.com/abc", "keys": {"p256dh": "key", "auth": "secret"}}
    response = client.post("/api/subscribe", json=body)

    assert response.status_code == 201
    assert response.json() == {"message": "Subscription successful"}
    assert sent == [{"title": "Welcome!", "body": "You are now subscribed to notifications."}]

    # same endpoint again updates instead of duplicating
    assert client.post("/api/subscribe", json=body).status_code == 201


def test_vapid_public_key(client):
    response = client.get("/api/vapidPublicKey")
    assert response.status_code == 200


def test_status_change_pushes_to_members(app, client, project, board):
    sent = []
    app.dependency_overrides[get_push_sender] = lambda: lambda subscription, payload: sent.append(payload) or True
    client.post("/api/auth/signup", json={"email": "dan@example.com", "password": "pw"})
    client.post(f"/api/projects/{project['id']}/members", json={"email": "dan@example.com"})
    body = {"endpoint": "https://push.example.com/dan", "keys": {"p256dh": "key", "auth": "secret"}}
    client.post("/api/subscribe", json=body)
    sent.clear()
    task = client.post(
        "/api/tasks", json={"title": "Ship", "projectId": project["id"], "boardId": board["id"]}
    ).json()

    client.patch(f"/api/tasks/{task['id']}", json={"title": "Ship it"})
    assert sent == []

    client.patch(f"/api/tasks/{task['id']}", json={"columnId": _column_id(board, "Done")})
    assert [payload["body"] for payload in sent] == ['Task "Ship it" moved to done']
