"""
tests/test_task_routes.py -- Integration tests for the task catalog routes.

Coverage:
  - GET /api/tasks is public and lists newest first
  - POST /api/tasks: admin 201 with id; worker 403 with no new row;
    unauthenticated 401; invalid body 422
"""

from __future__ import annotations

from fastapi.testclient import TestClient


def _task_ids(client: TestClient) -> list[int]:
    resp = client.get("/api/tasks")
    assert resp.status_code == 200
    return [t["id"] for t in resp.json()]


class TestTaskCatalog:
    def test_list_tasks_public(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.get("/api/tasks")
        assert resp.status_code == 200
        assert isinstance(resp.json(), list)

    def test_admin_creates_task(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        resp = client.post(
            "/api/tasks",
            json={"title": "Label 50 images", "description": "Cats vs dogs", "reward": 2.5},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["message"]
        tasks = {t["id"]: t for t in client.get("/api/tasks").json()}
        created = tasks[data["id"]]
        assert created["title"] == "Label 50 images"
        assert created["description"] == "Cats vs dogs"
        assert created["reward"] == 2.5
        assert created["created_at"]

    def test_tasks_listed_newest_first(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        headers = {"Authorization": f"Bearer {token}"}
        first = client.post("/api/tasks", json={"title": "Older", "reward": 1}, headers=headers).json()["id"]
        second = client.post("/api/tasks", json={"title": "Newer", "reward": 1}, headers=headers).json()["id"]
        ids = _task_ids(client)
        assert ids.index(second) < ids.index(first)

    def test_worker_cannot_create_task(self, api_client: tuple[TestClient, str, int], make_worker) -> None:
        """Non-admin POST /api/tasks returns 403 and writes nothing."""
        client, _token, _uid = api_client
        worker_token, _ = make_worker("tasks-worker@test.local")
        before = _task_ids(client)

        resp = client.post(
            "/api/tasks",
            json={"title": "Sneaky", "description": "", "reward": 100},
            headers={"Authorization": f"Bearer {worker_token}"},
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "forbidden"
        assert _task_ids(client) == before

    def test_unauthenticated_cannot_create_task(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.post("/api/tasks", json={"title": "Anon", "reward": 1})
        assert resp.status_code == 401

    def test_negative_reward_rejected(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        resp = client.post(
            "/api/tasks",
            json={"title": "Bad reward", "reward": -1},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 422
