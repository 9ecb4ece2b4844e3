"""HTTP client for the TaskDesk API.

Any object with ``request(method, url, json=..., params=..., headers=...)``
returning a response with ``status_code`` and ``json()`` can serve as
transport: a ``requests.Session`` by default, FastAPI's ``TestClient`` in tests.
"""
import logging
from typing import Any, Optional

import requests

from taskdesk.client.session import ClientSession

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Request failed. Please check your connection."


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return GENERIC_ERROR
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list) and detail:
        # validation error list
        first = detail[0]
        if isinstance(first, dict) and first.get("msg"):
            return str(first["msg"])
    return GENERIC_ERROR


class TaskDeskClient:
    def __init__(self, base_url: str, session: ClientSession, http: Any = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> Any:
        kwargs: dict[str, Any] = {"headers": self.session.auth_headers()}
        if json is not None:
            kwargs["json"] = json
        if params:
            kwargs["params"] = params
        if isinstance(self.http, requests.Session):
            kwargs["timeout"] = self.timeout
        response = self.http.request(method, f"{self.base_url}{path}", **kwargs)
        if response.status_code == 401:
            # Stale or rejected token: drop it so the user logs in again
            self.session.clear()
        if response.status_code >= 400:
            message = _error_message(response)
            logger.debug("%s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        if response.status_code == 204:
            return None
        return response.json()

    # auth
    def register(self, name: str, email: str, password: str, role: str = "employee") -> dict:
        return self._request("POST", "/users/register", json={"name": name, "email": email, "password": password, "role": role})

    def login(self, email: str, password: str, expected_role: str | None = None) -> ClientSession:
        """Log in and persist the session.

        With ``expected_role`` (a role-specific login page) an account of any
        other role is refused and nothing is kept.
        """
        data = self._request("POST", "/users/login", json={"email": email, "password": password})
        if expected_role is not None and data.get("role") != expected_role:
            self.session.clear()
            raise ApiError(403, f"This login is for {expected_role} accounts only")
        self.session.token = data["token"]
        self.session.role = data["role"]
        self.session.user_id = data["id"]
        self.session.user_name = data["name"]
        self.session.save()
        return self.session

    def logout(self) -> None:
        self.session.clear()

    def me(self) -> dict:
        return self._request("GET", "/users/me")

    def employees(self) -> list[dict]:
        return self._request("GET", "/users/employees")

    # users
    def create_user(self, **fields: Any) -> dict:
        return self._request("POST", "/users", json=fields)

    def list_users(self) -> list[dict]:
        return self._request("GET", "/users")

    def get_user(self, user_id: int) -> dict:
        return self._request("GET", f"/users/{user_id}")

    def update_user(self, user_id: int, **fields: Any) -> dict:
        return self._request("PUT", f"/users/{user_id}", json=fields)

    def delete_user(self, user_id: int) -> None:
        self._request("DELETE", f"/users/{user_id}")

    # tasks
    def create_task(self, title: str, assigned_to: int, description: str | None = None, status: str = "pending") -> dict:
        body = {"title": title, "assignedTo": assigned_to, "status": status}
        if description is not None:
            body["description"] = description
        return self._request("POST", "/tasks", json=body)

    def list_tasks(self) -> list[dict]:
        return self._request("GET", "/tasks")

    def get_task(self, task_id: int) -> dict:
        return self._request("GET", f"/tasks/{task_id}")

    def update_task(self, task_id: int, **fields: Any) -> dict:
        return self._request("PUT", f"/tasks/{task_id}", json=fields)

    def update_status(self, task_id: int, status: str) -> dict:
        return self.update_task(task_id, status=status)

    def delete_task(self, task_id: int) -> None:
        self._request("DELETE", f"/tasks/{task_id}")

    def my_tasks(self) -> list[dict]:
        """Tasks assigned to the logged-in user, filtered on this side."""
        return [t for t in self.list_tasks() if t.get("assignedTo") == self.session.user_id]

    def dashboard_tasks(self) -> list[dict]:
        if self.session.dashboard == "admin":
            return self.list_tasks()
        return self.my_tasks()
