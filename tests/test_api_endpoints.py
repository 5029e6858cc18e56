"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end.
"""

from fastapi.testclient import TestClient


NOW = "2025-01-15T09:30:00"


def _inbox_id(test_client: TestClient) -> str:
    lists = test_client.get("/lists").json()["lists"]
    return next(task_list["id"] for task_list in lists if task_list["is_default"])


class TestHealth:

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestListEndpoints:
    """Test list API endpoints."""

    def test_list_lists_creates_inbox(self, test_client):
        response = test_client.get("/lists")
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["lists"][0]["name"] == "Inbox"

    def test_create_update_delete_list(self, test_client):
        created = test_client.post("/lists", json={"name": "Work"})
        assert created.status_code == 201
        list_id = created.json()["list"]["id"]

        updated = test_client.patch(f"/lists/{list_id}", json={"icon": "💼"})
        assert updated.status_code == 200
        assert updated.json()["list"]["icon"] == "💼"

        assert test_client.delete(f"/lists/{list_id}").json() == {"success": True}
        assert test_client.delete(f"/lists/{list_id}").status_code == 404

    def test_empty_update_is_rejected(self, test_client):
        list_id = _inbox_id(test_client)
        response = test_client.patch(f"/lists/{list_id}", json={})
        assert response.status_code == 400

    def test_cannot_delete_default_list(self, test_client):
        response = test_client.delete(f"/lists/{_inbox_id(test_client)}")
        assert response.status_code == 400
        assert "default" in response.json()["detail"]


class TestLabelEndpoints:
    """Test label API endpoints."""

    def test_label_crud(self, test_client):
        created = test_client.post("/labels", json={"name": "Health"})
        assert created.status_code == 201
        label = created.json()["label"]
        assert label["color"] == "#6b7280"

        listed = test_client.get("/labels").json()
        assert listed["count"] == 1

        renamed = test_client.patch(f"/labels/{label['id']}", json={"name": "Wellness"})
        assert renamed.json()["label"]["name"] == "Wellness"

        assert test_client.delete(f"/labels/{label['id']}").status_code == 200
        assert test_client.patch(f"/labels/{label['id']}", json={"name": "x"}).status_code == 404


class TestTaskEndpoints:
    """Test task CRUD API endpoints."""

    def test_create_task(self, test_client):
        response = test_client.post(
            "/tasks",
            json={
                "list_id": _inbox_id(test_client),
                "title": "Test Task",
                "description": "Test notes",
                "estimated_minutes": 30,
                "subtask_titles": ["a", "b"],
            },
        )
        assert response.status_code == 201
        task = response.json()["task"]
        assert task["title"] == "Test Task"
        assert task["priority"] == "none"
        assert task["completed"] is False
        assert len(task["subtasks"]) == 2
        assert task["change_logs"][0]["description"] == "Task created"

    def test_create_task_unknown_list(self, test_client):
        response = test_client.post("/tasks", json={"list_id": "missing", "title": "x"})
        assert response.status_code == 400

    def test_create_task_blank_title(self, test_client):
        response = test_client.post("/tasks", json={"list_id": _inbox_id(test_client), "title": " "})
        assert response.status_code == 400

    def test_list_get_update_delete(self, test_client):
        list_id = _inbox_id(test_client)
        task_id = test_client.post("/tasks", json={"list_id": list_id, "title": "Get me"}).json()["task"]["id"]

        listed = test_client.get("/tasks")
        assert listed.status_code == 200
        assert listed.json()["count"] == 1

        fetched = test_client.get(f"/tasks/{task_id}")
        assert fetched.json()["task"]["title"] == "Get me"

        patched = test_client.patch(f"/tasks/{task_id}", json={"completed": True, "priority": "high"})
        assert patched.status_code == 200
        task = patched.json()["task"]
        assert task["completed"] is True
        assert task["completed_at"] is not None
        assert task["priority"] == "high"

        assert test_client.get("/tasks").json()["count"] == 0
        assert test_client.get("/tasks", params={"include_completed": True}).json()["count"] == 1

        assert test_client.delete(f"/tasks/{task_id}").status_code == 200
        assert test_client.get(f"/tasks/{task_id}").status_code == 404

    def test_update_missing_task(self, test_client):
        assert test_client.patch("/tasks/missing", json={"title": "x"}).status_code == 404

    def test_invalid_view(self, test_client):
        assert test_client.get("/tasks", params={"view": "someday"}).status_code == 422


class TestQuickAddEndpoints:
    """Test natural-language parse and quick-add endpoints."""

    def test_parse_preview(self, test_client):
        response = test_client.post(
            "/tasks/parse",
            json={"text": "Submit report by friday at 5pm 1.5h !! #work", "now": NOW},
        )
        assert response.status_code == 200
        draft = response.json()["draft"]
        assert draft["title"] == "Submit report"
        assert draft["deadline"] == "2025-01-17T17:00:00"
        assert draft["schedule_date"] is None
        assert draft["priority"] == "medium"
        assert draft["estimated_minutes"] == 90
        assert draft["labels"] == ["work"]

        # preview only
        assert test_client.get("/tasks").json()["count"] == 0

    def test_quick_add(self, test_client):
        label_id = test_client.post("/labels", json={"name": "Health"}).json()["label"]["id"]

        response = test_client.post(
            "/tasks/quick-add",
            json={"text": "Call dentist tomorrow at 2pm urgent #health", "now": NOW},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["draft"]["labels"] == ["health"]
        task = data["task"]
        assert task["title"] == "Call dentist"
        assert task["priority"] == "high"
        assert task["schedule_date"] == "2025-01-16T14:00:00"
        assert [label["id"] for label in task["labels"]] == [label_id]

    def test_quick_add_without_title(self, test_client):
        response = test_client.post("/tasks/quick-add", json={"text": "tomorrow urgent", "now": NOW})
        assert response.status_code == 400

    def test_quick_add_unknown_list(self, test_client):
        response = test_client.post("/tasks/quick-add", json={"text": "Read", "list_id": "missing"})
        assert response.status_code == 400
