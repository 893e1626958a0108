from datetime import date, timedelta

import pytest

from app.core.errors import NotFound, ValidationError
from app.models.task import Task
from app.services import task_service


# ========== TEST CREATE TASK ==========
def test_create_task_defaults(client, auth_headers):
    """Tester la création d'une tâche avec juste un titre"""
    response = client.post("/tasks", headers=auth_headers, json={"title": "Buy milk"})
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Buy milk"
    assert data["priority"] == "medium"
    assert data["done"] is False
    assert data["due_date"] is None
    assert data["remote_id"] is None


def test_create_task_with_priority_and_due_date(client, auth_headers):
    response = client.post(
        "/tasks",
        headers=auth_headers,
        json={"title": "  Rapport  ", "priority": "high", "due_date": "2026-10-20"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Rapport"
    assert data["priority"] == "high"
    assert data["due_date"] == "2026-10-20"


@pytest.mark.parametrize("payload", [
    {"title": "   "},
    {"title": ""},
    {},
    {"title": "Ok", "priority": "urgent"},
])
def test_create_task_invalid(client, auth_headers, db, payload):
    """Titre vide ou priorité inconnue → 422, rien n'est écrit"""
    response = client.post("/tasks", headers=auth_headers, json=payload)
    assert response.status_code == 422
    assert db.query(Task).count() == 0


# ========== TEST LIST TASKS ==========
def test_list_tasks_newest_first(client, auth_headers):
    for title in ["Tâche 1", "Tâche 2", "Tâche 3"]:
        client.post("/tasks", headers=auth_headers, json={"title": title})

    data = client.get("/tasks", headers=auth_headers).json()
    assert [t["title"] for t in data] == ["Tâche 3", "Tâche 2", "Tâche 1"]


def test_list_tasks_only_own(client, auth_headers, other_headers):
    client.post("/tasks", headers=auth_headers, json={"title": "Mine"})
    client.post("/tasks", headers=other_headers, json={"title": "Theirs"})

    data = client.get("/tasks", headers=auth_headers).json()
    assert [t["title"] for t in data] == ["Mine"]


def test_list_tasks_by_due_date(client, auth_headers):
    client.post("/tasks", headers=auth_headers, json={"title": "A", "due_date": "2026-10-20"})
    client.post("/tasks", headers=auth_headers, json={"title": "B", "due_date": "2026-10-21"})
    client.post("/tasks", headers=auth_headers, json={"title": "C"})

    data = client.get("/tasks?due=2026-10-20", headers=auth_headers).json()
    assert [t["title"] for t in data] == ["A"]


def test_today_tasks(client, auth_headers):
    today = date.today()
    client.post("/tasks", headers=auth_headers, json={"title": "Today", "due_date": today.isoformat()})
    client.post("/tasks", headers=auth_headers, json={"title": "Tomorrow", "due_date": (today + timedelta(days=1)).isoformat()})

    data = client.get("/tasks/today", headers=auth_headers).json()
    assert [t["title"] for t in data] == ["Today"]


# ========== TEST GET TASK ==========
def test_get_task_of_other_user_is_not_found(client, auth_headers, other_headers):
    task_id = client.post("/tasks", headers=other_headers, json={"title": "Private"}).json()["id"]

    response = client.get(f"/tasks/{task_id}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Task not found"


# ========== TEST UPDATE TASK ==========
def test_update_task_partial(client, auth_headers):
    created = client.post(
        "/tasks", headers=auth_headers, json={"title": "Original", "priority": "low", "due_date": "2026-10-20"}
    ).json()

    response = client.put(f"/tasks/{created['id']}", headers=auth_headers, json={"done": True})
    assert response.status_code == 200
    data = response.json()
    assert data["done"] is True
    assert data["title"] == "Original"
    assert data["priority"] == "low"
    assert data["due_date"] == "2026-10-20"


def test_update_task_clear_due_date(client, auth_headers):
    created = client.post("/tasks", headers=auth_headers, json={"title": "T", "due_date": "2026-10-20"}).json()

    data = client.put(f"/tasks/{created['id']}", headers=auth_headers, json={"due_date": None}).json()
    assert data["due_date"] is None


@pytest.mark.parametrize("payload", [
    {"priority": None},
    {"priority": "urgent"},
    {"title": "  "},
    {"title": None},
    {"done": None},
])
def test_update_task_invalid(client, auth_headers, payload):
    created = client.post("/tasks", headers=auth_headers, json={"title": "T"}).json()

    response = client.put(f"/tasks/{created['id']}", headers=auth_headers, json=payload)
    assert response.status_code == 422


def test_update_task_of_other_user_fails(client, auth_headers, other_headers):
    task_id = client.post("/tasks", headers=other_headers, json={"title": "Theirs"}).json()["id"]

    response = client.put(f"/tasks/{task_id}", headers=auth_headers, json={"done": True})
    assert response.status_code == 404

    # La tâche de l'autre n'a pas bougé
    assert client.get(f"/tasks/{task_id}", headers=other_headers).json()["done"] is False


# ========== TEST DELETE TASK ==========
def test_delete_task_removes_from_list_and_counts(client, auth_headers):
    keep = client.post("/tasks", headers=auth_headers, json={"title": "Keep", "due_date": "2026-10-20"}).json()
    gone = client.post("/tasks", headers=auth_headers, json={"title": "Gone", "due_date": "2026-10-20"}).json()
    assert client.get("/tasks/counts", headers=auth_headers).json() == {"counts": {"2026-10-20": 2}}

    response = client.delete(f"/tasks/{gone['id']}", headers=auth_headers)
    assert response.status_code == 204
    assert "X-Sync-Warning" not in response.headers

    tasks = client.get("/tasks", headers=auth_headers).json()
    assert [t["id"] for t in tasks] == [keep["id"]]
    assert client.get("/tasks/counts", headers=auth_headers).json() == {"counts": {"2026-10-20": 1}}


def test_delete_missing_task_is_ok(client, auth_headers):
    assert client.delete("/tasks/9999", headers=auth_headers).status_code == 204


def test_delete_task_of_other_user_fails(client, auth_headers, other_headers):
    task_id = client.post("/tasks", headers=other_headers, json={"title": "Theirs"}).json()["id"]

    assert client.delete(f"/tasks/{task_id}", headers=auth_headers).status_code == 404
    assert client.get(f"/tasks/{task_id}", headers=other_headers).status_code == 200


# ========== TEST COUNTS ==========
def test_counts_by_due_date(client, auth_headers, other_headers):
    client.post("/tasks", headers=auth_headers, json={"title": "A", "due_date": "2026-10-20"})
    client.post("/tasks", headers=auth_headers, json={"title": "B", "due_date": "2026-10-20"})
    client.post("/tasks", headers=auth_headers, json={"title": "C", "due_date": "2026-11-01"})
    client.post("/tasks", headers=auth_headers, json={"title": "No date"})
    client.post("/tasks", headers=other_headers, json={"title": "Other", "due_date": "2026-10-20"})

    response = client.get("/tasks/counts", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"counts": {"2026-10-20": 2, "2026-11-01": 1}}


# ========== TEST task_service ==========
def test_service_create_rejects_blank_title(db, user):
    with pytest.raises(ValidationError):
        task_service.create_task(db, user.id, "   ")
    assert db.query(Task).count() == 0


def test_service_create_defaults_priority(db, user):
    task = task_service.create_task(db, user.id, "Buy milk", priority=None)
    assert task.priority == "medium"
    assert task.done is False
    assert task.created_at is not None


def test_service_update_rejects_unknown_field(db, user):
    task = task_service.create_task(db, user.id, "T")
    with pytest.raises(ValidationError):
        task_service.update_task(db, user.id, task.id, {"user_id": 42})


def test_service_update_other_owner(db, user, other_user):
    task = task_service.create_task(db, other_user.id, "Theirs")
    with pytest.raises(NotFound):
        task_service.update_task(db, user.id, task.id, {"title": "Mine now"})


def test_service_find_task(db, user, other_user):
    task = task_service.create_task(db, other_user.id, "Theirs")
    assert task_service.find_task(db, user.id, 9999) is None
    assert task_service.find_task(db, other_user.id, task.id).id == task.id
    with pytest.raises(NotFound):
        task_service.find_task(db, user.id, task.id)


def test_service_validation_error_maps_to_422(client, auth_headers, monkeypatch):
    """Une ValidationError du store remonte en 422 via le handler d'erreurs"""
    def reject(*args, **kwargs):
        raise ValidationError("Title is required")

    monkeypatch.setattr(task_service, "create_task", reject)

    response = client.post("/tasks", headers=auth_headers, json={"title": "T"})
    assert response.status_code == 422
    assert response.json() == {"detail": "Title is required"}
