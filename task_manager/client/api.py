"""HTTP client for the task API.

Inputs are checked locally before a request is sent; any failure is raised as
``TaskApiError`` carrying the server's ``message`` or a fallback.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from ..enums import PriorityLevel, TaskStatus
from ..utils import is_valid_object_id
from .list_view import ClientTask

logger = logging.getLogger(__name__)


class TaskApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class TaskListPage:
    tasks: List[ClientTask]
    total: int
    page: int
    limit: int
    total_pages: int


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    message = body.get("message") if isinstance(body, dict) else None
    return message if isinstance(message, str) and message else fallback


def _require_id(task_id: str) -> None:
    if not is_valid_object_id(task_id):
        raise TaskApiError("Invalid task ID")


def _enum_value(enum_cls, value, label: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        raise TaskApiError(f"Invalid {label}") from None


def _wire_fields(fields: dict) -> dict:
    body = {}
    for key, value in fields.items():
        if key in ("priority_level", "priorityLevel"):
            body["priorityLevel"] = _enum_value(PriorityLevel, value, "priority level")
        elif key == "status":
            body["status"] = _enum_value(TaskStatus, value, "status")
        else:
            body[key] = value
    return body


class TaskApiClient:
    """Synchronous client; ``token`` is sent as a bearer credential."""

    def __init__(self, base_url: str, token: Optional[str] = None, client: Optional[httpx.Client] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = client or httpx.Client(base_url=self.base_url, timeout=httpx.Timeout(10.0))

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TaskApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, fallback: str, **kwargs):
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Task API request failed", extra={"path": path, "error": str(exc)})
            raise TaskApiError(fallback) from exc
        if response.is_error:
            raise TaskApiError(_error_message(response, fallback), response.status_code)
        return response.json()

    # Authentication

    def register(self, name: str, email: str, password: str) -> dict:
        if not name or not email or not password:
            raise TaskApiError("All fields are required for registration.")
        return self._request(
            "POST",
            "/api/auth/register",
            "Registration failed",
            json={"name": name, "email": email, "password": password},
        )

    def login(self, email: str, password: str) -> dict:
        """Log in and keep the returned token for later calls."""
        if not email or not password:
            raise TaskApiError("Email and password are required.")
        data = self._request("POST", "/api/auth/login", "Login failed", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    # Tasks

    def get_tasks(self, page: int = 1, limit: int = 10) -> TaskListPage:
        data = self._request("GET", "/api/tasks", "Failed to fetch tasks", params={"page": page, "limit": limit})
        meta = data["meta"]
        return TaskListPage(
            tasks=[ClientTask.from_json(item) for item in data["data"]],
            total=meta["total"],
            page=meta["page"],
            limit=meta["limit"],
            total_pages=meta["totalPages"],
        )

    def create_task(self, name: str, **fields) -> ClientTask:
        if not name or not isinstance(name, str):
            raise TaskApiError("Task name is required and must be a string")
        body = _wire_fields({"name": name, **fields})
        return ClientTask.from_json(self._request("POST", "/api/tasks", "Failed to create task", json=body))

    def get_task(self, task_id: str) -> ClientTask:
        _require_id(task_id)
        return ClientTask.from_json(self._request("GET", f"/api/tasks/{task_id}", "Failed to fetch task"))

    def update_task(self, task_id: str, **updates) -> ClientTask:
        _require_id(task_id)
        if not updates:
            raise TaskApiError("At least one field is required to update the task")
        data = self._request("PUT", f"/api/tasks/{task_id}", "Failed to update task", json=_wire_fields(updates))
        return ClientTask.from_json(data)

    def update_task_status(self, task_id: str, status) -> ClientTask:
        _require_id(task_id)
        if not status:
            raise TaskApiError("Task status is required")
        data = self._request(
            "PATCH",
            f"/api/tasks/status/{task_id}",
            "Failed to update task status",
            json={"status": _enum_value(TaskStatus, status, "status")},
        )
        return ClientTask.from_json(data)

    def update_task_priority(self, task_id: str, priority_level) -> ClientTask:
        _require_id(task_id)
        if not priority_level:
            raise TaskApiError("Priority level is required")
        data = self._request(
            "PATCH",
            f"/api/tasks/priority/{task_id}",
            "Failed to update task priority",
            json={"priorityLevel": _enum_value(PriorityLevel, priority_level, "priority level")},
        )
        return ClientTask.from_json(data)

    def delete_task(self, task_id: str) -> dict:
        _require_id(task_id)
        return self._request("DELETE", f"/api/tasks/{task_id}", "Failed to delete task")
