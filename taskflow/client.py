"""HTTP client for the Taskflow API.

Results are reported to the user through a :class:`NotificationQueue`:
mutations show a success notification, failures go through
``handle_error`` before the :class:`ApiError` is raised to the caller.
"""
import logging
from typing import Any, Optional

import httpx

from .notifications import NotificationQueue

logger = logging.getLogger(__name__)

ERROR_CODES_BY_STATUS = {
    400: "invalid-argument",
    401: "unauthenticated",
    403: "permission-denied",
    404: "not-found",
    409: "failed-precondition",
}


class ApiError(Exception):
    """Raised for non-2xx responses and transport failures."""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = None
        message = (body.get("message") if isinstance(body, dict) else None) or response.text
        code = ERROR_CODES_BY_STATUS.get(response.status_code, "internal")
        return cls(code, message, response.status_code)


class TaskflowClient:
    def __init__(self, http: httpx.Client, notifications: NotificationQueue, prefix: str = "/api") -> None:
        self.http = http
        self.notifications = notifications
        self.prefix = prefix

    def _request(self, method: str, path: str, operation: str, success: Optional[str] = None, **kwargs) -> Any:
        logger.debug("%s %s (%s)", method, path, operation)
        try:
            response = self.http.request(method, f"{self.prefix}{path}", **kwargs)
        except httpx.TransportError as exc:
            error = ApiError("unavailable", f"network error: {exc}")
            self.notifications.handle_error(error, operation)
            raise error from exc

        if response.is_error:
            error = ApiError.from_response(response)
            self.notifications.handle_error(error, operation)
            raise error

        if success:
            self.notifications.success(success)
        return response.json()

    # projects
    def list_projects(self) -> list:
        return self._request("GET", "/projects", "load projects")

    def create_project(self, name: str, description: Optional[str] = None) -> dict:
        return self._request(
            "POST", "/projects", "create project",
            success=f'Project "{name}" created',
            json={"name": name, "description": description},
        )

    def delete_project(self, project_id: str) -> dict:
        return self._request("DELETE", f"/projects/{project_id}", "delete project", success="Project deleted")

    def get_boards(self, project_id: str) -> list:
        return self._request("GET", f"/projects/{project_id}/boards", "load boards")

    # boards
    def create_board(self, name: str, project_id: str) -> dict:
        return self._request(
            "POST", "/boards", "create board",
            success=f'Board "{name}" created',
            json={"name": name, "projectId": project_id},
        )

    def delete_board(self, board_id: str) -> dict:
        return self._request("DELETE", f"/boards/{board_id}", "delete board", success="Board deleted")

    # tasks
    def create_task(self, title: str, project_id: str, board_id: str, column_id: Optional[str] = None, **fields) -> dict:
        body = {"title": title, "projectId": project_id, "boardId": board_id, "columnId": column_id, **fields}
        return self._request("POST", "/tasks", "create task", success="Task created", json=body)

    def update_task(self, task_id: str, **changes) -> dict:
        return self._request("PATCH", f"/tasks/{task_id}", "update task", success="Task updated", json=changes)

    def move_task(self, task_id: str, column_id: str) -> dict:
        return self._request("PATCH", f"/tasks/{task_id}", "move task", json={"columnId": column_id})

    def delete_task(self, task_id: str) -> dict:
        return self._request("DELETE", f"/tasks/{task_id}", "delete task", success="Task deleted")
