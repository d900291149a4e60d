"""
HTTP client for the Tasklist API plus the client-side todo list state.

Usage:
    session = SessionManager(FileTokenStorage())
    client = TasklistClient("http://localhost:5001", session)
    client.login("ada@example.com", "secret")
    board = TodoBoard(client)
    board.refresh()
"""

from typing import Any, Dict, List, Optional, Union

import httpx
from loguru import logger

from tasklist_client.session import SessionManager


class ApiError(Exception):
    """A request failed; ``message`` is the server's message or a fallback."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _server_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None


class TasklistClient:

    def __init__(
        self,
        base_url_or_client: Union[str, httpx.Client],
        session: SessionManager,
        timeout: float = 10.0
    ):
        # A client passed in belongs to the caller and is left open
        self._owns_http = not isinstance(base_url_or_client, httpx.Client)
        if self._owns_http:
            self.http = httpx.Client(base_url=base_url_or_client, timeout=timeout)
        else:
            self.http = base_url_or_client
        self.session = session

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "TasklistClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        fallback: str,
        json: Optional[Dict[str, Any]] = None,
        protected: bool = True
    ) -> Any:
        headers = self.session.auth_headers() if protected else {}
        try:
            response = self.http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(fallback) from e

        if response.is_error:
            raise ApiError(_server_message(response) or fallback, response.status_code)
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{method} {path} returned a non-JSON body")
            raise ApiError(fallback, response.status_code) from e

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        return self._request(
            "POST", "/api/auth/register", "Registration failed. Please try again.",
            json={"name": name, "email": email, "password": password},
            protected=False
        )

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request(
            "POST", "/api/auth/login", "Login failed. Please try again.",
            json={"email": email, "password": password},
            protected=False
        )
        self.session.set_token(data["token"], data.get("user"))
        return data

    def logout(self) -> None:
        self.session.logout()

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health", "Health check failed", protected=False)

    def list_todos(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/todos", "Failed to fetch todos")

    def add_todo(self, title: str) -> Dict[str, Any]:
        return self._request("POST", "/api/todos", "Failed to add todo", json={"title": title})

    def update_todo(self, todo_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._request(
            "PATCH", f"/api/todos/{todo_id}", "Failed to update todo", json=updates)

    def delete_todo(self, todo_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/todos/{todo_id}", "Failed to delete todo")


class TodoBoard:
    """
    The signed-in user's todo list as the client sees it.

    A failed request records ``error`` and clears ``loading`` but leaves
    ``todos`` as they were.
    """

    def __init__(self, client: TasklistClient):
        self.client = client
        self.todos: List[Dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None

    def clear_error(self) -> None:
        self.error = None

    def refresh(self) -> None:
        if not self.client.session.is_authenticated:
            self.todos = []
            return

        self.loading = True
        try:
            self.todos = self.client.list_todos()
            self.error = None
        except ApiError as e:
            self.error = e.message
            logger.warning(f"Error fetching todos: {e.message}")
        finally:
            self.loading = False

    def add(self, title: str) -> Dict[str, Any]:
        self.loading = True
        try:
            todo = self.client.add_todo(title)
            self.todos = [todo] + self.todos
            self.error = None
            return todo
        except ApiError as e:
            self.error = e.message
            raise
        finally:
            self.loading = False

    def update(self, todo_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        self.loading = True
        try:
            updated = self.client.update_todo(todo_id, updates)
            self.todos = [
                {**todo, **updated} if todo["_id"] == todo_id else todo
                for todo in self.todos
            ]
            self.error = None
            return updated
        except ApiError as e:
            self.error = e.message
            raise
        finally:
            self.loading = False

    def delete(self, todo_id: str) -> None:
        self.loading = True
        try:
            self.client.delete_todo(todo_id)
            self.todos = [todo for todo in self.todos if todo["_id"] != todo_id]
            self.error = None
        except ApiError as e:
            self.error = e.message
            raise
        finally:
            self.loading = False
