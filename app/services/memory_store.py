"""
In-process store used for development without MongoDB and for tests.

Documents are copied on the way in and out so callers never share state
with the store.
"""

import asyncio
import copy
from typing import Any, Dict, List, Optional

from bson import ObjectId

from app.exceptions import ConflictError
from app.services.store import Store


class MemoryStore(Store):

    name = "memory"

    def __init__(self):
        self._users: Dict[str, Dict[str, Any]] = {}
        self._todos: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def ping(self) -> Dict[str, Any]:
        return {
            "connected": True,
            "name": self.name,
            "todos": len(self._todos),
            "users": len(self._users)
        }

    async def create_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            if any(u["email"] == user_data["email"] for u in self._users.values()):
                raise ConflictError("User with this email already exists", field="email")
            user_doc = {**copy.deepcopy(user_data), "_id": str(ObjectId())}
            self._users[user_doc["_id"]] = user_doc
            return copy.deepcopy(user_doc)

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        for user in self._users.values():
            if user["email"] == email:
                return copy.deepcopy(user)
        return None

    async def list_todos(self, owner_id: str) -> List[Dict[str, Any]]:
        todos = [t for t in self._todos.values() if t["owner_id"] == owner_id]
        todos.sort(key=lambda t: (t["created_at"], t["_id"]), reverse=True)
        return copy.deepcopy(todos)

    async def create_todo(self, todo_data: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            todo_doc = {**copy.deepcopy(todo_data), "_id": str(ObjectId())}
            self._todos[todo_doc["_id"]] = todo_doc
            return copy.deepcopy(todo_doc)

    def _owned(self, owner_id: str, todo_id: str) -> Optional[Dict[str, Any]]:
        todo = self._todos.get(todo_id)
        if todo is None or todo["owner_id"] != owner_id:
            return None
        return todo

    async def update_todo(
        self,
        owner_id: str,
        todo_id: str,
        fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        async with self._lock:
            todo = self._owned(owner_id, todo_id)
            if todo is None:
                return None
            todo.update(copy.deepcopy(fields))
            return copy.deepcopy(todo)

    async def delete_todo(self, owner_id: str, todo_id: str) -> bool:
        async with self._lock:
            if self._owned(owner_id, todo_id) is None:
                return False
            del self._todos[todo_id]
            return True
