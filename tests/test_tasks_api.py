"""End-to-end tests for the /api/tasks routes."""

from datetime import datetime
from unittest.mock import Mock

import pytest

from task_manager.repositories.task_repository import TaskRepository
from task_manager.services.task_service import MAX_PAGING_VALUE, get_task_repository

UNKNOWN_ID = "0123456789abcdef01234567"


def create(client, headers, **body):
    body.setdefault("name", "Write report")
    response = client.post("/api/tasks", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreate:
    def test_defaults_and_owner(self, client, alice_headers):
        task = create(client, alice_headers, name="Buy milk")

        assert task["name"] == "Buy milk"
        assert task["description"] == ""
        assert task["priorityLevel"] == "Medium"
        assert task["status"] == "Pending"
        assert task["owner"] == "a1a1a1a1a1a1a1a1a1a1a1a1"
        assert len(task["id"]) == 24
        assert task["createdAt"] == task["updatedAt"]

    def test_all_fields(self, client, alice_headers):
        task = create(
            client,
            alice_headers,
            name="Ship release",
            description="tag and publish",
            priorityLevel="High",
            status="In Progress",
        )

        assert task["description"] == "tag and publish"
        assert task["priorityLevel"] == "High"
        assert task["status"] == "In Progress"

    def test_owner_in_body_is_ignored(self, client, alice_headers):
        task = create(client, alice_headers, owner="b2b2b2b2b2b2b2b2b2b2b2b2")
        assert task["owner"] == "a1a1a1a1a1a1a1a1a1a1a1a1"

    @pytest.mark.parametrize("body", [{}, {"name": ""}, {"name": 42}, {"name": None}])
    def test_name_required(self, client, alice_headers, body):
        response = client.post("/api/tasks", json=body, headers=alice_headers)

        assert response.status_code == 400
        assert response.json() == {"message": "Name is required and must be a string"}

    def test_missing_body(self, client, alice_headers):
        response = client.post("/api/tasks", headers=alice_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Name is required and must be a string"

    @pytest.mark.parametrize("field,value", [("status", "Archived"), ("priorityLevel", "Urgent")])
    def test_invalid_enum_rejected(self, client, alice_headers, field, value):
        response = client.post("/api/tasks", json={"name": "x", field: value}, headers=alice_headers)

        assert response.status_code == 400
        assert "must be one of" in response.json()["message"]
        listing = client.get("/api/tasks", headers=alice_headers).json()
        assert listing["meta"]["total"] == 0


class TestList:
    def test_empty(self, client, alice_headers):
        response = client.get("/api/tasks", headers=alice_headers)

        assert response.status_code == 200
        assert response.json() == {
            "meta": {
                "page": 1,
                "limit": 10,
                "total": 0,
                "totalPages": 0,
                "hasNextPage": False,
                "hasPrevPage": False,
            },
            "data": [],
        }

    def test_newest_first_and_paging(self, client, alice_headers):
        names = [f"task {i}" for i in range(5)]
        for name in names:
            create(client, alice_headers, name=name)

        first = client.get("/api/tasks?page=1&limit=2", headers=alice_headers).json()
        second = client.get("/api/tasks?page=2&limit=2", headers=alice_headers).json()
        third = client.get("/api/tasks?page=3&limit=2", headers=alice_headers).json()

        returned = [t["name"] for t in first["data"] + second["data"] + third["data"]]
        assert returned == list(reversed(names))
        assert first["meta"] == {
            "page": 1,
            "limit": 2,
            "total": 5,
            "totalPages": 3,
            "hasNextPage": True,
            "hasPrevPage": False,
        }
        assert third["meta"]["hasNextPage"] is False
        assert third["meta"]["hasPrevPage"] is True

    def test_repeated_calls_are_stable(self, client, alice_headers):
        for i in range(4):
            create(client, alice_headers, name=f"t{i}")

        first = client.get("/api/tasks", headers=alice_headers).json()["data"]
        second = client.get("/api/tasks", headers=alice_headers).json()["data"]

        assert [t["id"] for t in first] == [t["id"] for t in second]

    @pytest.mark.parametrize("raw", ["0", "-4", "abc", ""])
    def test_bad_page_falls_back_to_first(self, client, alice_headers, raw):
        create(client, alice_headers)

        meta = client.get(f"/api/tasks?page={raw}", headers=alice_headers).json()["meta"]

        assert meta["page"] == 1
        assert meta["hasPrevPage"] is False

    def test_bad_limit_is_coerced(self, client, alice_headers):
        assert client.get("/api/tasks?limit=abc", headers=alice_headers).json()["meta"]["limit"] == 10
        assert client.get("/api/tasks?limit=-3", headers=alice_headers).json()["meta"]["limit"] == 1

    @pytest.mark.parametrize(
        "params",
        [{"page": "1e20"}, {"limit": "99999999999999999999"}, {"page": "1e20", "limit": "1e20"}],
    )
    def test_huge_paging_values(self, client, alice_headers, params):
        create(client, alice_headers)

        response = client.get("/api/tasks", params=params, headers=alice_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["total"] == 1
        assert body["meta"]["page"] <= MAX_PAGING_VALUE
        assert body["meta"]["limit"] <= MAX_PAGING_VALUE

    def test_only_own_tasks_are_listed(self, client, alice_headers, bob_headers):
        create(client, alice_headers, name="alice's")
        create(client, bob_headers, name="bob's")

        data = client.get("/api/tasks", headers=alice_headers).json()

        assert [t["name"] for t in data["data"]] == ["alice's"]
        assert data["meta"]["total"] == 1


class TestGet:
    def test_round_trip(self, client, alice_headers):
        created = create(client, alice_headers, name="Read book", description="chapter 3", priorityLevel="Low")

        response = client.get(f"/api/tasks/{created['id']}", headers=alice_headers)

        assert response.status_code == 200
        assert response.json() == created

    def test_unknown_id(self, client, alice_headers):
        response = client.get(f"/api/tasks/{UNKNOWN_ID}", headers=alice_headers)

        assert response.status_code == 404
        assert response.json() == {"message": "Task not found"}

    def test_other_owner_gets_not_found(self, client, alice_headers, bob_headers):
        created = create(client, alice_headers)

        response = client.get(f"/api/tasks/{created['id']}", headers=bob_headers)

        assert response.status_code == 404
        assert response.json() == {"message": "Task not found"}


class TestUpdate:
    def test_partial_full_update(self, client, alice_headers):
        created = create(client, alice_headers, name="Draft", description="v1", priorityLevel="Low")

        response = client.put(
            f"/api/tasks/{created['id']}",
            json={"name": "Final", "status": "Done"},
            headers=alice_headers,
        )

        assert response.status_code == 200
        fetched = client.get(f"/api/tasks/{created['id']}", headers=alice_headers).json()
        assert fetched["name"] == "Final"
        assert fetched["status"] == "Done"
        assert fetched["description"] == "v1"
        assert fetched["priorityLevel"] == "Low"
        assert fetched["createdAt"] == created["createdAt"]
        assert datetime.fromisoformat(fetched["updatedAt"]) > datetime.fromisoformat(created["updatedAt"])

    def test_updated_at_increases_on_each_update(self, client, alice_headers):
        created = create(client, alice_headers)
        stamps = [datetime.fromisoformat(created["updatedAt"])]
        for status in ("In Progress", "Done", "Pending"):
            task = client.patch(
                f"/api/tasks/status/{created['id']}", json={"status": status}, headers=alice_headers
            ).json()
            stamps.append(datetime.fromisoformat(task["updatedAt"]))

        assert stamps == sorted(stamps)
        assert len(set(stamps)) == len(stamps)

    def test_empty_description_counts_as_a_field(self, client, alice_headers):
        created = create(client, alice_headers, description="something")

        response = client.put(f"/api/tasks/{created['id']}", json={"description": ""}, headers=alice_headers)

        assert response.status_code == 200
        assert response.json()["description"] == ""

    def test_no_fields(self, client, alice_headers):
        created = create(client, alice_headers)

        response = client.put(f"/api/tasks/{created['id']}", json={}, headers=alice_headers)

        assert response.status_code == 400
        assert response.json()["message"].startswith("At least one field")

    def test_empty_name_rejected(self, client, alice_headers):
        created = create(client, alice_headers)

        response = client.put(f"/api/tasks/{created['id']}", json={"name": ""}, headers=alice_headers)

        assert response.status_code == 400

    def test_failed_update_leaves_task_unchanged(self, client, alice_headers):
        created = create(client, alice_headers, name="Keep me")

        response = client.put(
            f"/api/tasks/{created['id']}",
            json={"name": "Changed", "status": "Blocked"},
            headers=alice_headers,
        )

        assert response.status_code == 400
        assert client.get(f"/api/tasks/{created['id']}", headers=alice_headers).json() == created

    def test_other_owner_cannot_update(self, client, alice_headers, bob_headers):
        created = create(client, alice_headers)

        response = client.put(f"/api/tasks/{created['id']}", json={"name": "hijack"}, headers=bob_headers)

        assert response.status_code == 404
        assert client.get(f"/api/tasks/{created['id']}", headers=alice_headers).json()["name"] == created["name"]


class TestStatusAndPriority:
    def test_status_only_touches_status(self, client, alice_headers):
        created = create(client, alice_headers, priorityLevel="High", description="d")

        task = client.patch(
            f"/api/tasks/status/{created['id']}", json={"status": "In Progress"}, headers=alice_headers
        ).json()

        assert task["status"] == "In Progress"
        assert {k: task[k] for k in ("name", "description", "priorityLevel", "createdAt")} == {
            k: created[k] for k in ("name", "description", "priorityLevel", "createdAt")
        }

    def test_priority_only_touches_priority(self, client, alice_headers):
        created = create(client, alice_headers, status="Done")

        task = client.patch(
            f"/api/tasks/priority/{created['id']}", json={"priorityLevel": "Low"}, headers=alice_headers
        ).json()

        assert task["priorityLevel"] == "Low"
        assert task["status"] == "Done"

    def test_status_required(self, client, alice_headers):
        created = create(client, alice_headers)

        response = client.patch(f"/api/tasks/status/{created['id']}", json={}, headers=alice_headers)

        assert response.status_code == 400
        assert response.json() == {"message": "Status is required"}

    def test_priority_required(self, client, alice_headers):
        created = create(client, alice_headers)

        response = client.patch(f"/api/tasks/priority/{created['id']}", json={}, headers=alice_headers)

        assert response.status_code == 400
        assert response.json() == {"message": "Priority level is required"}

    def test_invalid_status_value(self, client, alice_headers):
        created = create(client, alice_headers)

        response = client.patch(
            f"/api/tasks/status/{created['id']}", json={"status": "done"}, headers=alice_headers
        )

        assert response.status_code == 400
        assert client.get(f"/api/tasks/{created['id']}", headers=alice_headers).json()["status"] == "Pending"

    def test_not_found(self, client, alice_headers):
        response = client.patch(
            f"/api/tasks/priority/{UNKNOWN_ID}", json={"priorityLevel": "High"}, headers=alice_headers
        )

        assert response.status_code == 404


class TestDelete:
    def test_delete_is_permanent(self, client, alice_headers):
        created = create(client, alice_headers)

        response = client.delete(f"/api/tasks/{created['id']}", headers=alice_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Task deleted successfully"}
        assert client.get(f"/api/tasks/{created['id']}", headers=alice_headers).status_code == 404
        assert client.delete(f"/api/tasks/{created['id']}", headers=alice_headers).status_code == 404

    def test_other_owner_cannot_delete(self, client, alice_headers, bob_headers):
        created = create(client, alice_headers)

        assert client.delete(f"/api/tasks/{created['id']}", headers=bob_headers).status_code == 404
        assert client.get(f"/api/tasks/{created['id']}", headers=alice_headers).status_code == 200


class TestMalformedId:
    @pytest.fixture
    def store(self, app):
        repository = Mock(spec=TaskRepository)
        app.dependency_overrides[get_task_repository] = lambda: repository
        return repository

    @pytest.mark.parametrize(
        "method,path,body",
        [
            ("GET", "/api/tasks/xyz", None),
            ("PUT", "/api/tasks/xyz", {"name": "n"}),
            ("PATCH", "/api/tasks/status/xyz", {"status": "Done"}),
            ("PATCH", "/api/tasks/priority/xyz", {"priorityLevel": "Low"}),
            ("DELETE", "/api/tasks/xyz", None),
        ],
    )
    def test_rejected_before_store(self, client, alice_headers, store, method, path, body):
        response = client.request(method, path, json=body, headers=alice_headers)

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid task ID"}
        assert store.mock_calls == []


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
