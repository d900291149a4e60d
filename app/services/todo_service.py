from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from bson import ObjectId
from loguru import logger

from app.exceptions import NotFoundError, ValidationError
from app.services.store import Store

TODO_NOT_FOUND = "Todo not found"


def _utcnow() -> datetime:
    # Mongo keeps millisecond precision; truncate so stored and returned values agree
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _clean_title(title: Any) -> str:
    if not isinstance(title, str):
        raise ValidationError("Title is required and must be a string")
    cleaned = title.strip()
    if not cleaned:
        raise ValidationError("Title is required and must be a string")
    return cleaned


def _check_id(todo_id: str) -> None:
    if not ObjectId.is_valid(todo_id):
        raise ValidationError("Invalid todo ID")


class TodoService:
    """
    CRUD over the todo collection, scoped to the authenticated owner.

    Concurrent updates to one todo are not versioned: the last write wins.
    """

    def __init__(self, store: Store, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.clock = clock

    async def list(self, owner_id: str) -> List[Dict[str, Any]]:
        return await self.store.list_todos(owner_id)

    async def create(self, owner_id: str, title: Any) -> Dict[str, Any]:
        cleaned = _clean_title(title)
        now = self.clock()
        todo = await self.store.create_todo({
            "owner_id": owner_id,
            "title": cleaned,
            "completed": False,
            "created_at": now,
            "updated_at": now
        })
        logger.info(f"Todo {todo['_id']} created by {owner_id}")
        return todo

    async def update(self, owner_id: str, todo_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        _check_id(todo_id)

        fields: Dict[str, Any] = {}
        if "title" in changes:
            if not isinstance(changes["title"], str):
                raise ValidationError("Title must be a string")
            fields["title"] = _clean_title(changes["title"])
        if "completed" in changes:
            if not isinstance(changes["completed"], bool):
                raise ValidationError("Completed must be a boolean")
            fields["completed"] = changes["completed"]
        fields["updated_at"] = self.clock()

        todo = await self.store.update_todo(owner_id, todo_id, fields)
        if todo is None:
            raise NotFoundError(TODO_NOT_FOUND)

        logger.info(f"Todo {todo_id} updated by {owner_id}: {sorted(fields)}")
        return todo

    async def delete(self, owner_id: str, todo_id: str) -> Dict[str, str]:
        _check_id(todo_id)

        if not await self.store.delete_todo(owner_id, todo_id):
            raise NotFoundError(TODO_NOT_FOUND)

        logger.info(f"Todo {todo_id} deleted by {owner_id}")
        return {"message": "Todo deleted successfully"}
