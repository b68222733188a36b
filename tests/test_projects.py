"""Tests for projects, tasks, comments, notifications and reports."""


def create_project(client, headers, name="Apollo", **extra):
    response = client.post("/api/projects", headers=headers, json={"name": name, **extra})
    assert response.status_code == 201, response.text
    return response.json()


def create_task(client, headers, project_id, title="Write report", **extra):
    response = client.post(
        "/api/tasks", headers=headers, json={"title": title, "project_id": project_id, **extra}
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_project_adds_creator_to_team(client, auth_headers):
    project = create_project(client, auth_headers, description="Moon shot")

    assert project["name"] == "Apollo"
    assert project["description"] == "Moon shot"
    assert [m["id"] for m in project["team"]] == [auth_headers.user_id]


def test_create_project_name_is_trimmed(client, auth_headers):
    project = create_project(client, auth_headers, name="  Gemini  ")
    assert project["name"] == "Gemini"


def test_create_project_blank_name(client, auth_headers):
    response = client.post("/api/projects", headers=auth_headers, json={"name": "   "})
    assert response.status_code == 400


def test_create_project_duplicate_name(client, auth_headers):
    create_project(client, auth_headers)
    response = client.post("/api/projects", headers=auth_headers, json={"name": "Apollo"})
    assert response.status_code == 409


def test_admin_creates_project_with_pmo(client, admin_headers, auth_headers):
    project = create_project(client, admin_headers, pmo_id=auth_headers.user_id)
    assert {m["id"] for m in project["team"]} == {admin_headers.user_id, auth_headers.user_id}


def test_pmo_ignored_for_standard_user(client, auth_headers, other_headers):
    project = create_project(client, auth_headers, pmo_id=other_headers.user_id)
    assert [m["id"] for m in project["team"]] == [auth_headers.user_id]


def test_list_projects_only_member_projects(client, auth_headers, other_headers):
    create_project(client, auth_headers, name="Mine")
    create_project(client, other_headers, name="Theirs")

    response = client.get("/api/projects", headers=auth_headers)

    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Mine"]


def test_delete_project(client, auth_headers):
    project = create_project(client, auth_headers)
    create_task(client, auth_headers, project["id"])

    response = client.delete(f"/api/projects/{project['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == 'Project "Apollo" deleted successfully.'
    assert client.get("/api/tasks", headers=auth_headers).json() == []


def test_remove_member(client, auth_headers, other_headers):
    project = create_project(client, auth_headers)
    client.post(
        f"/api/projects/{project['id']}/members",
        headers=auth_headers,
        json={"user_id": other_headers.user_id},
    )

    response = client.delete(
        f"/api/projects/{project['id']}/members/{other_headers.user_id}", headers=auth_headers
    )

    assert response.status_code == 200
    assert [m["id"] for m in response.json()["team"]] == [auth_headers.user_id]
    assert client.get(f"/api/projects/{project['id']}", headers=other_headers).status_code == 403


def test_add_unknown_member(client, auth_headers):
    project = create_project(client, auth_headers)
    response = client.post(
        f"/api/projects/{project['id']}/members", headers=auth_headers, json={"user_id": 999999}
    )
    assert response.status_code == 404


def test_create_task_defaults(client, auth_headers):
    project = create_project(client, auth_headers)
    task = create_task(client, auth_headers, project["id"])

    assert task["status"] == "TO_DO"
    assert task["priority"] == "MEDIUM"
    assert task["creator_id"] == auth_headers.user_id
    assert task["assignee_id"] is None


def test_create_task_missing_title(client, auth_headers):
    project = create_project(client, auth_headers)
    response = client.post("/api/tasks", headers=auth_headers, json={"project_id": project["id"]})
    assert response.status_code == 400


def test_create_task_unknown_assignee(client, auth_headers):
    project = create_project(client, auth_headers)
    response = client.post(
        "/api/tasks",
        headers=auth_headers,
        json={"title": "Orphan", "project_id": project["id"], "assignee_id": 999999},
    )
    assert response.status_code == 404


def test_update_task(client, auth_headers):
    project = create_project(client, auth_headers)
    task = create_task(client, auth_headers, project["id"])

    response = client.put(
        f"/api/tasks/{task['id']}",
        headers=auth_headers,
        json={"status": "IN_PROGRESS", "priority": "HIGH", "description": "Halfway"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "IN_PROGRESS"
    assert data["priority"] == "HIGH"
    assert data["description"] == "Halfway"
    assert data["title"] == "Write report"


def test_update_task_null_title_is_ignored(client, auth_headers):
    project = create_project(client, auth_headers)
    task = create_task(client, auth_headers, project["id"])

    response = client.put(f"/api/tasks/{task['id']}", headers=auth_headers, json={"title": None})

    assert response.status_code == 200
    assert response.json()["title"] == "Write report"


def test_delete_task(client, auth_headers):
    project = create_project(client, auth_headers)
    task = create_task(client, auth_headers, project["id"])

    response = client.delete(f"/api/tasks/{task['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Task deleted"
    assert client.delete(f"/api/tasks/{task['id']}", headers=auth_headers).status_code == 403


def test_comments(client, auth_headers):
    project = create_project(client, auth_headers)
    task = create_task(client, auth_headers, project["id"])

    created = client.post(
        f"/api/tasks/{task['id']}/comments", headers=auth_headers, json={"content": "First!"}
    )
    listed = client.get(f"/api/tasks/{task['id']}/comments", headers=auth_headers)

    assert created.status_code == 201
    assert created.json()["author"]["id"] == auth_headers.user_id
    assert [c["content"] for c in listed.json()] == ["First!"]


def test_empty_comment_rejected(client, auth_headers):
    project = create_project(client, auth_headers)
    task = create_task(client, auth_headers, project["id"])

    response = client.post(
        f"/api/tasks/{task['id']}/comments", headers=auth_headers, json={"content": ""}
    )
    assert response.status_code == 400


def test_assignment_notifies_assignee(client, auth_headers, other_headers):
    project = create_project(client, auth_headers)
    task = create_task(client, auth_headers, project["id"], assignee_id=other_headers.user_id)

    notifications = client.get("/api/notifications", headers=other_headers).json()
    assert len(notifications) == 1
    assert notifications[0]["type"] == "TASK_ASSIGNMENT"
    assert notifications[0]["read"] is False
    assert task["title"] in notifications[0]["message"]

    assert client.get("/api/notifications", headers=auth_headers).json() == []


def test_reassignment_notifies_new_assignee(client, auth_headers, other_headers):
    project = create_project(client, auth_headers)
    task = create_task(client, auth_headers, project["id"])

    client.put(
        f"/api/tasks/{task['id']}",
        headers=auth_headers,
        json={"assignee_id": other_headers.user_id},
    )

    notifications = client.get("/api/notifications", headers=other_headers).json()
    assert [n["type"] for n in notifications] == ["TASK_UPDATE"]


def test_mark_notification_read(client, auth_headers, other_headers):
    project = create_project(client, auth_headers)
    create_task(client, auth_headers, project["id"], assignee_id=other_headers.user_id)
    notification = client.get("/api/notifications", headers=other_headers).json()[0]

    stolen = client.put(f"/api/notifications/{notification['id']}/read", headers=auth_headers)
    response = client.put(f"/api/notifications/{notification['id']}/read", headers=other_headers)

    assert stolen.status_code == 404
    assert response.status_code == 200
    assert response.json()["read"] is True


def test_task_report(client, auth_headers):
    project = create_project(client, auth_headers)
    first = create_task(client, auth_headers, project["id"], title="One")
    create_task(client, auth_headers, project["id"], title="Two")
    create_task(client, auth_headers, project["id"], title="Three")
    client.put(f"/api/tasks/{first['id']}", headers=auth_headers, json={"status": "DONE"})

    response = client.get("/api/reports", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "to_do": 2,
        "in_progress": 0,
        "done": 1,
        "total": 3,
        "completion_rate": 33,
    }


def test_task_report_is_scoped(client, auth_headers, other_headers):
    project = create_project(client, auth_headers)
    create_task(client, auth_headers, project["id"])

    response = client.get("/api/reports", headers=other_headers)

    assert response.json()["total"] == 0
    scoped = client.get(
        "/api/reports", headers=other_headers, params={"project_id": project["id"]}
    )
    assert scoped.status_code == 403
